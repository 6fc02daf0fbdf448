"""Stage controller - one stage's lifecycle from first keystroke to completion event.

States: ``active`` -> ``submitting`` -> ``done``. A submit that fails field
validation drops back to ``active``; a timed stage whose clock runs out is
forced to ``done`` with zero points.

The score is always computed first; the completion event is emitted after a
fixed display delay so the player can read their result. A pending emission
can be cancelled (the player quit), in which case nothing is emitted.
Outside a running event loop there is nothing to wait on, so the event is
emitted straight away.
"""

import asyncio
import logging
from typing import Callable, Literal

from dataentry.config import settings
from dataentry.core.errors import ContractViolation, StageValidationError
from dataentry.core.scoring import compute_accuracy, compute_error_count, compute_stage_score
from dataentry.core.validation import field_error, validate_field, validate_submission
from dataentry.schemas.stage import ScoreResult, StageDefinition

logger = logging.getLogger("dataentry.core.stage")

StageStatus = Literal["active", "submitting", "done"]


class StageController:
    """Collects field input for one stage, scores it on submit and reports the result."""

    def __init__(
        self,
        stage: StageDefinition,
        on_complete: Callable[[ScoreResult], None],
        *,
        submit_delay: float | None = None,
        timeout_delay: float | None = None,
        time_bonus_divisor: int | None = None,
    ):
        self.stage = stage
        self._on_complete = on_complete
        self._submit_delay = settings.SUBMIT_DISPLAY_DELAY_SECONDS if submit_delay is None else submit_delay
        self._timeout_delay = settings.TIMEOUT_DISPLAY_DELAY_SECONDS if timeout_delay is None else timeout_delay
        self._time_bonus_divisor = time_bonus_divisor

        self.status: StageStatus = "active"
        self.submission: dict[str, str] = {f.id: f.blank_value for f in stage.fields}
        self.field_errors: dict[str, str] = {}
        self.time_remaining: int | None = stage.time_limit_seconds
        self.result: ScoreResult | None = None

        self._pending: asyncio.TimerHandle | None = None
        self._emitted = False
        self._cancelled = False

    # --- Field input ---

    def update_field(self, field_id: str, value: str) -> bool:
        """Store a field value and return whether it currently validates.

        A now-valid field loses its error message; an invalid one keeps
        whatever message it had until the next blur check or submit.
        """
        self._require_active("update a field")
        field = self._get_field(field_id)
        self.submission[field_id] = value

        valid = validate_field(field, value)
        if valid:
            self.field_errors.pop(field_id, None)
        return valid

    def check_field(self, field_id: str) -> str | None:
        """Blur-time check: record and return the field's error message, if any."""
        field = self._get_field(field_id)
        message = field_error(field, self.submission.get(field_id, ""))
        if message is None:
            self.field_errors.pop(field_id, None)
        else:
            self.field_errors[field_id] = message
        return message

    # --- Submission ---

    def submit(self) -> ScoreResult:
        """Validate the whole form and, if it passes, score the stage.

        Raises:
            StageValidationError: some field failed validation. The stage is
                back in ``active`` and ``field_errors`` holds the messages.
            ContractViolation: the stage is not active.
        """
        self._require_active("submit")
        self.status = "submitting"

        errors = validate_submission(self.stage.fields, self.submission)
        if errors:
            self.status = "active"
            self.field_errors = errors
            logger.info("Stage %d submit rejected: %d invalid field(s)", self.stage.sequence_number, len(errors))
            raise StageValidationError(errors)

        self.field_errors = {}
        result = ScoreResult(
            stage=self.stage.sequence_number,
            score=compute_stage_score(
                self.stage,
                self.submission,
                self.time_remaining,
                time_bonus_divisor=self._time_bonus_divisor,
            ),
            accuracy=compute_accuracy(self.submission, self.stage.expected_values),
            error_count=compute_error_count(self.stage, self.submission),
            time_remaining=self.time_remaining,
        )
        self._finish(result, self._submit_delay)
        return result

    def tick(self) -> ScoreResult | None:
        """Advance the stage clock by one second.

        Returns the forced result when the clock hits zero. Ticks that arrive
        after the stage is already done are ignored.
        """
        if not self.stage.is_timed:
            raise ContractViolation(f"stage {self.stage.sequence_number} is not timed")
        if self.status != "active":
            return None

        self.time_remaining = max(0, self.time_remaining - 1)
        if self.time_remaining == 0:
            return self._force_timeout()
        return None

    def _force_timeout(self) -> ScoreResult:
        # No validation gate and no points: accuracy and errors still reflect
        # whatever was entered before the clock ran out.
        result = ScoreResult(
            stage=self.stage.sequence_number,
            score=0,
            accuracy=compute_accuracy(self.submission, self.stage.expected_values),
            error_count=compute_error_count(self.stage, self.submission),
            time_remaining=0,
            timed_out=True,
        )
        logger.info("Stage %d timed out", self.stage.sequence_number)
        self._finish(result, self._timeout_delay)
        return result

    # --- Completion event ---

    @property
    def is_pending(self) -> bool:
        """True while a computed result is waiting out its display delay."""
        return self._pending is not None

    def cancel(self) -> None:
        """Drop a pending completion event. No-op if nothing is pending."""
        self._cancelled = True
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
            logger.info("Stage %d completion discarded", self.stage.sequence_number)

    def _finish(self, result: ScoreResult, delay: float) -> None:
        loop = _running_loop() if delay > 0 else None
        self.status = "done"
        self.result = result
        if loop is None:
            # No loop to wait on (zero delay or a synchronous caller)
            self._emit(result)
        else:
            self._pending = loop.call_later(delay, self._emit, result)

    def _emit(self, result: ScoreResult) -> None:
        self._pending = None
        if self._cancelled:
            return
        if self._emitted:
            raise ContractViolation(f"stage {self.stage.sequence_number} already emitted its result")
        self._emitted = True
        self._on_complete(result)

    # --- Helpers ---

    def _require_active(self, action: str) -> None:
        if self.status != "active":
            raise ContractViolation(
                f"cannot {action} on stage {self.stage.sequence_number} while {self.status}"
            )

    def _get_field(self, field_id: str):
        field = self.stage.get_field(field_id)
        if field is None:
            raise ContractViolation(f"stage {self.stage.sequence_number} has no field '{field_id}'")
        return field


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
