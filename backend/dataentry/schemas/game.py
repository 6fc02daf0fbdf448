"""Game-session Pydantic schemas: state snapshots, summaries and API payloads."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from dataentry.schemas.stage import FieldDefinition, ScoreResult

# "failed" is reserved; nothing transitions into it yet
GameStatus = Literal["intro", "playing", "completed", "failed"]


class GameStateSnapshot(BaseModel):
    """Read-only copy of the game state, taken after a transition."""
    model_config = ConfigDict(frozen=True)

    current_stage_index: int
    total_stages: int
    cumulative_score: int
    cumulative_errors: int
    cumulative_accuracy: int
    status: GameStatus


class GameSummary(BaseModel):
    """End-of-game report shown on the completion screen."""
    state: GameStateSnapshot
    history: list[ScoreResult]
    rating: str
    achievements: list[str]


class StageView(BaseModel):
    """What the player sees of the active stage. Never includes expected values."""
    sequence_number: int
    name: str
    description: str
    reference_material: str
    fields: list[FieldDefinition]
    field_groups: dict[str, list[str]] | None
    values: dict[str, str]
    field_errors: dict[str, str]
    status: str
    time_remaining: int | None
    result: ScoreResult | None = None


class GameStateResponse(BaseModel):
    session_id: str
    state: GameStateSnapshot
    stage: StageView | None = None


class FieldUpdateRequest(BaseModel):
    value: str


class FieldUpdateResponse(BaseModel):
    field_id: str
    valid: bool
    error: str | None = None


class TickResponse(BaseModel):
    time_remaining: int | None
    result: ScoreResult | None = None


class SubmitErrorResponse(BaseModel):
    detail: str
    errors: dict[str, str]
