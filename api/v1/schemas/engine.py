from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Tuple, Union

# Ceiling for the exp fields of one level-resolve request
MAX_EXP_PER_REQUEST = 1_000_000


# 🎯 1. Operation catalogue
class OperationInfo(BaseModel):
    op: str
    group: str
    labeled: bool


# 🧠 2. Move configuration
class MoveConfig(BaseModel):
    range: Tuple[int, int]
    ops: List[str] = Field(default_factory=list)


# 📩 3. Generated question
class QuestionOut(BaseModel):
    display: str
    answer: int
    choices: List[int]
    op: str
    steps: List[str]
    choice_labels: Optional[List[str]] = None
    answer_label: Optional[str] = None


class QuestionRequest(BaseModel):
    move: MoveConfig
    diff_mod: float = Field(default=1.0, gt=0, le=5)
    allowed_ops: Optional[List[str]] = None
    seed: Optional[Union[int, str]] = None


# 📈 4. Adaptive question (difficulty taken from the ability model)
class AbilityBucket(BaseModel):
    level: int = Field(ge=0, le=4)
    recent: List[bool] = Field(default_factory=list)


class AdaptiveQuestionRequest(BaseModel):
    move: MoveConfig
    ability_model: Optional[Dict[str, AbilityBucket]] = None
    allowed_ops: Optional[List[str]] = None
    seed: Optional[Union[int, str]] = None


class AdaptiveQuestionResponse(BaseModel):
    difficulty_level: int
    diff_mod: float
    question: QuestionOut


# ✅ 5. Ability model lifecycle
class NewAbilityModelRequest(BaseModel):
    initial_level: Optional[int] = None


class AbilityUpdateRequest(BaseModel):
    model: Optional[Dict[str, AbilityBucket]] = None
    op: str
    correct: bool
    window_size: Optional[int] = Field(default=None, ge=1, le=50)


class AbilityUpdateResponse(BaseModel):
    group: str
    next_level: int
    next_recent: List[bool]
    next_model: Dict[str, AbilityBucket]


# 🧾 6. Level / evolution progress
class LevelProgressRequest(BaseModel):
    current_exp: int = Field(ge=0, le=MAX_EXP_PER_REQUEST)
    current_level: int = Field(ge=1)
    current_stage: int = Field(default=0, ge=0)
    gain_exp: int = Field(ge=0, le=MAX_EXP_PER_REQUEST)
    max_stage: int = Field(default=2, ge=0)
    evolve_every: int = Field(default=3, ge=1)
    hp_bonus_per_level: int = Field(default=20, ge=0)


class LevelProgressResponse(BaseModel):
    next_exp: int
    next_level: int
    hp_bonus: int
    evolve_count: int
