"""Error types raised by the scoring and stage-progression core."""


class DataEntryError(Exception):
    """Base class for all errors raised by the game core."""


class ContractViolation(DataEntryError):
    """The caller drove a state machine through a transition it doesn't allow.

    Not recoverable by the player: it means the surrounding orchestration is
    out of sync with the controllers.
    """


class StageValidationError(DataEntryError):
    """A stage submission was rejected by field validation.

    Attributes:
        errors: field id -> human-readable message, in form order.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        super().__init__(f"{len(errors)} field(s) failed validation: {', '.join(errors)}")


class StageCatalogError(DataEntryError):
    """The stage catalog could not be loaded."""
