EXP_PER_LEVEL = 30


def exp_to_next_level(level: int) -> int:
    # Threshold grows linearly with level
    return max(1, level) * EXP_PER_LEVEL


def resolve_level_progress(
    current_exp: int,
    current_level: int,
    current_stage: int,
    gain_exp: int,
    max_stage: int = 2,
    evolve_every: int = 3,
    hp_bonus_per_level: int = 20,
) -> dict:
    """
    Spend accumulated experience on level-ups. A level that lands on a
    multiple of ``evolve_every`` advances the evolution stage (until
    ``max_stage``); every other level-up grants ``hp_bonus_per_level``.
    """
    next_exp = current_exp + gain_exp
    next_level = max(1, current_level)
    stage = current_stage
    hp_bonus = 0
    evolve_count = 0

    while next_exp >= exp_to_next_level(next_level):
        next_exp -= exp_to_next_level(next_level)
        next_level += 1
        if stage < max_stage and evolve_every > 0 and next_level % evolve_every == 0:
            stage += 1
            evolve_count += 1
        else:
            hp_bonus += hp_bonus_per_level

    return {
        "next_exp": next_exp,
        "next_level": next_level,
        "hp_bonus": hp_bonus,
        "evolve_count": evolve_count,
    }
