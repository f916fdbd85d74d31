import copy

from api.utils.ability import (
    ABILITY_GROUPS,
    create_ability_model,
    get_bucket,
    get_difficulty_level_for_op,
    get_difficulty_level_for_ops,
    map_op_to_ability_group,
    update_ability_model,
    update_adaptive_difficulty,
)


def test_high_accuracy_raises_level():
    result = update_adaptive_difficulty(2, [True, True, True, True], False)
    assert result["next_recent"] == [True, True, True, True, False]
    assert result["next_level"] == 3


def test_low_accuracy_lowers_level():
    result = update_adaptive_difficulty(3, [False, False, True, False], False)
    assert result["next_level"] == 2


def test_small_sample_never_moves():
    assert update_adaptive_difficulty(2, [True], True)["next_level"] == 2
    assert update_adaptive_difficulty(2, [False], False)["next_level"] == 2


def test_dead_zone_keeps_level():
    # 3 of 6 correct = 0.5
    result = update_adaptive_difficulty(2, [True, False, True, False, True], False)
    assert result["next_level"] == 2


def test_window_is_truncated_and_bounds_respected():
    result = update_adaptive_difficulty(4, [True] * 6, True)
    assert len(result["next_recent"]) == 6
    assert result["next_level"] == 4
    result = update_adaptive_difficulty(0, [False] * 6, False)
    assert result["next_level"] == 0


def test_map_op_to_ability_group():
    assert map_op_to_ability_group("+") == "add"
    assert map_op_to_ability_group("÷") == "div"
    assert map_op_to_ability_group("unknown3") == "unknown"
    assert map_op_to_ability_group("frac_muldiv") == "fraction"
    assert map_op_to_ability_group(None) == "mixed"
    assert map_op_to_ability_group("dec_add") == "mixed"
    assert map_op_to_ability_group(42) == "mixed"
    assert map_op_to_ability_group("mixed4") == map_op_to_ability_group("mixed4")


def test_create_ability_model():
    model = create_ability_model(2)
    assert set(model) == set(ABILITY_GROUPS)
    assert model == create_ability_model(2)
    assert all(bucket == {"level": 2, "recent": []} for bucket in model.values())
    assert create_ability_model(9)["add"]["level"] == 4
    assert create_ability_model(-3)["add"]["level"] == 0


def test_get_bucket_tolerates_malformed_input():
    assert get_bucket(None, "add") == {"level": 2, "recent": []}
    assert get_bucket({"add": "oops"}, "add", 1) == {"level": 1, "recent": []}
    assert get_bucket({"add": {"level": "x", "recent": "no"}}, "add") == {"level": 2, "recent": []}
    assert get_bucket({"add": {"level": 3, "recent": [True]}}, "add") == {"level": 3, "recent": [True]}
    assert get_bucket({"add": {"level": float("nan")}}, "add") == {"level": 2, "recent": []}
    assert get_bucket({"add": {"level": float("-inf")}}, "add", 1) == {"level": 1, "recent": []}


def test_non_finite_levels_fall_back_to_defaults():
    assert create_ability_model(float("nan"))["add"]["level"] == 2
    assert create_ability_model(float("inf"))["mul"]["level"] == 2
    result = update_ability_model({"add": {"level": float("inf"), "recent": []}}, "+", True)
    assert result["group"] == "add"
    assert result["next_level"] == 2
    assert result["next_model"]["add"] == {"level": 2, "recent": [True]}
    assert get_difficulty_level_for_ops({"add": {"level": float("nan")}}, ["+"]) == 2


def test_difficulty_level_lookups():
    model = create_ability_model(2)
    model["add"]["level"] = 4
    model["sub"]["level"] = 1
    assert get_difficulty_level_for_op(model, "+") == 4
    assert get_difficulty_level_for_ops(model, ["+", "-"]) == 3
    assert get_difficulty_level_for_ops(model, []) == 2
    assert get_difficulty_level_for_ops(None, ["×"], 1) == 1


def test_update_ability_model_returns_full_new_model():
    model = create_ability_model(2)
    before = copy.deepcopy(model)
    result = update_ability_model(model, "×", True)
    assert result["group"] == "mul"
    assert result["next_recent"] == [True]
    assert result["next_model"]["mul"] == {"level": 2, "recent": [True]}
    assert set(result["next_model"]) == set(ABILITY_GROUPS)
    assert model == before


def test_update_ability_model_normalizes_missing_buckets():
    result = update_ability_model({"add": {"level": 3, "recent": []}}, "frac_cmp", False)
    assert result["group"] == "fraction"
    assert result["next_model"]["add"] == {"level": 3, "recent": []}
    assert result["next_model"]["sub"] == {"level": 2, "recent": []}
    assert result["next_model"]["fraction"]["recent"] == [False]


def test_repeated_success_climbs_one_step_per_answer():
    model = create_ability_model(1)
    levels = []
    for _ in range(6):
        result = update_ability_model(model, "+", True)
        model = result["next_model"]
        levels.append(result["next_level"])
    assert levels == [1, 1, 1, 2, 3, 4]
