from fastapi import APIRouter
import logging

from api.v1.schemas import engine as schemas
from api.utils.ability import create_ability_model, update_ability_model
from api.utils.math_topics import gen_q, gen_q_for_model, list_operations
from api.utils.progression import resolve_level_progress
from api.utils.randomness import create_seeded_random
from api.utils.settings import ENGINE_BASELINE_LEVEL, ENGINE_WINDOW_SIZE

logger = logging.getLogger(__name__)

engine = APIRouter(prefix="/engine", tags=["Question Engine"])

# The engine keeps no state between calls: clients send their ability model
# with each request and store whatever comes back.


def _rng_for(seed):
    return create_seeded_random(seed) if seed is not None else None


def _dump_model(model):
    if model is None:
        return None
    return {group: bucket.model_dump() for group, bucket in model.items()}


# --- 1. Known operations ---
@engine.get("/operations", response_model=list[schemas.OperationInfo])
def get_operations():
    return list_operations()


# --- 2. Single question ---
@engine.post("/question", response_model=schemas.QuestionOut)
def generate_question(payload: schemas.QuestionRequest):
    question = gen_q(
        payload.move.model_dump(),
        payload.diff_mod,
        allowed_ops=payload.allowed_ops,
        rng=_rng_for(payload.seed),
    )
    logger.info("Generated %s question: %s", question["op"], question["display"])
    return question


# --- 3. Question sized by the ability model ---
@engine.post("/question/adaptive", response_model=schemas.AdaptiveQuestionResponse)
def generate_adaptive_question(payload: schemas.AdaptiveQuestionRequest):
    result = gen_q_for_model(
        payload.move.model_dump(),
        _dump_model(payload.ability_model),
        allowed_ops=payload.allowed_ops,
        rng=_rng_for(payload.seed),
        fallback_level=ENGINE_BASELINE_LEVEL,
    )
    logger.info(
        "Generated %s question at level %s",
        result["question"]["op"],
        result["difficulty_level"],
    )
    return result


# --- 4. Fresh ability model ---
@engine.post("/ability/new", response_model=dict[str, schemas.AbilityBucket])
def new_ability_model(payload: schemas.NewAbilityModelRequest):
    level = payload.initial_level if payload.initial_level is not None else ENGINE_BASELINE_LEVEL
    return create_ability_model(level)


# --- 5. Record an answer ---
@engine.post("/ability/update", response_model=schemas.AbilityUpdateResponse)
def record_answer(payload: schemas.AbilityUpdateRequest):
    result = update_ability_model(
        _dump_model(payload.model),
        payload.op,
        payload.correct,
        window_size=payload.window_size or ENGINE_WINDOW_SIZE,
        fallback_level=ENGINE_BASELINE_LEVEL,
    )
    logger.info(
        "Ability %s -> level %s (%s)",
        result["group"],
        result["next_level"],
        "correct" if payload.correct else "wrong",
    )
    return result


# --- 6. Level / evolution progress ---
@engine.post("/level/resolve", response_model=schemas.LevelProgressResponse)
def resolve_level(payload: schemas.LevelProgressRequest):
    return resolve_level_progress(**payload.model_dump())
