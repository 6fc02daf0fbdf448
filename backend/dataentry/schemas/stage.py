"""Stage-related Pydantic schemas: form fields, stage definitions and score results."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# "textarea" is the multi-line text kind
FieldKind = Literal["text", "email", "number", "select", "date", "checkbox", "textarea"]


class FieldDefinition(BaseModel):
    """One labeled input slot in a stage's form."""
    id: str = Field(min_length=1)
    label: str
    kind: FieldKind = "text"
    required: bool = False
    options: list[str] | None = None  # only for kind == "select"
    validation_rule: str | None = None  # e.g. "email"
    placeholder: str | None = None

    @model_validator(mode="after")
    def _check_options(self) -> "FieldDefinition":
        if self.kind == "select" and not self.options:
            raise ValueError(f"select field '{self.id}' needs at least one option")
        if self.kind != "select" and self.options is not None:
            raise ValueError(f"field '{self.id}' has options but is not a select field")
        return self

    @property
    def blank_value(self) -> str:
        """Value a fresh form starts with for this field."""
        return "false" if self.kind == "checkbox" else ""


class StageDefinition(BaseModel):
    """One level of the game, loaded from the stage catalog.

    Everything except the completion bookkeeping at the bottom is fixed once
    the catalog is loaded. ``submission``, ``time_remaining`` and
    ``timed_out`` are recorded by the game controller when the stage's
    completion is consumed, so totals can be recomputed from the stage list.
    """
    sequence_number: int = Field(ge=1)
    name: str
    description: str = ""
    fields: list[FieldDefinition] = Field(min_length=1)
    expected_values: dict[str, str]
    points_per_correct_field: int = Field(ge=0)
    penalty_per_incorrect_field: int = Field(ge=0)
    reference_material: str = ""
    time_limit_seconds: int | None = Field(default=None, gt=0)  # None = untimed
    # Display hint for tabbed forms: group name -> field ids
    field_groups: dict[str, list[str]] | None = None

    # Completion bookkeeping
    completed: bool = False
    submission: dict[str, str] = Field(default_factory=dict)
    time_remaining: int | None = None
    timed_out: bool = False

    @model_validator(mode="after")
    def _check_field_references(self) -> "StageDefinition":
        ids = [f.id for f in self.fields]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"duplicate field ids: {', '.join(duplicates)}")

        known = set(ids)
        unknown = sorted(set(self.expected_values) - known)
        if unknown:
            raise ValueError(f"expected values reference unknown fields: {', '.join(unknown)}")

        for group, group_ids in (self.field_groups or {}).items():
            missing = [i for i in group_ids if i not in known]
            if missing:
                raise ValueError(f"field group '{group}' references unknown fields: {', '.join(missing)}")
        return self

    @property
    def is_timed(self) -> bool:
        return self.time_limit_seconds is not None

    @property
    def field_ids(self) -> list[str]:
        return [f.id for f in self.fields]

    def get_field(self, field_id: str) -> FieldDefinition | None:
        """Look up a field by id. Returns None if the stage has no such field."""
        for field in self.fields:
            if field.id == field_id:
                return field
        return None


class StageSummary(BaseModel):
    sequence_number: int
    name: str
    description: str
    field_count: int
    is_timed: bool


class ScoreResult(BaseModel):
    """Outcome of one stage. Never mutated once created."""
    model_config = ConfigDict(frozen=True)

    stage: int  # sequence number
    score: int = Field(ge=0)
    accuracy: int = Field(ge=0, le=100)
    error_count: int = Field(ge=0)
    time_remaining: int | None = None  # only for timed stages
    timed_out: bool = False
