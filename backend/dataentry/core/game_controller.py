"""Game controller - the intro -> playing -> completed state machine.

Owns the session's cumulative score, errors and accuracy, the ordered
history of stage results, and the stage controller for whichever stage is
being played. Any transition the state machine doesn't allow raises
``ContractViolation``.
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from dataentry.core.errors import ContractViolation
from dataentry.core.scoring import compute_total_errors, compute_total_score, running_accuracy
from dataentry.core.stage_controller import StageController
from dataentry.schemas.game import GameStateSnapshot, GameStatus, GameSummary
from dataentry.schemas.stage import ScoreResult, StageDefinition
from dataentry.services.rating_service import rating_service

logger = logging.getLogger("dataentry.core.game")


class StageStore(Protocol):
    def load_stages(self) -> list[StageDefinition]: ...


@dataclass
class GameState:
    current_stage_index: int = 1  # 1-based
    total_stages: int = 0
    cumulative_score: int = 0
    cumulative_errors: int = 0
    cumulative_accuracy: int = 0
    status: GameStatus = "intro"


@dataclass
class GameSession:
    """All mutable state of one play session."""
    stages: list[StageDefinition]
    state: GameState = field(default_factory=GameState)
    history: list[ScoreResult] = field(default_factory=list)

    def __post_init__(self):
        self.state.total_stages = len(self.stages)

    def reset(self, stages: list[StageDefinition]) -> None:
        """Back to a fresh intro screen with a new copy of the stage catalog."""
        self.stages = stages
        self.state = GameState(total_stages=len(stages))
        self.history = []


class GameController:
    def __init__(
        self,
        store: StageStore,
        session: GameSession | None = None,
        *,
        submit_delay: float | None = None,
        timeout_delay: float | None = None,
        time_bonus_divisor: int | None = None,
    ):
        self.store = store
        self.session = session if session is not None else GameSession(store.load_stages())
        self._stage_options = {
            "submit_delay": submit_delay,
            "timeout_delay": timeout_delay,
            "time_bonus_divisor": time_bonus_divisor,
        }
        self.active_stage: StageController | None = None

    # --- Read-only views ---

    @property
    def status(self) -> GameStatus:
        return self.session.state.status

    @property
    def history(self) -> tuple[ScoreResult, ...]:
        return tuple(self.session.history)

    @property
    def stages(self) -> list[StageDefinition]:
        return self.session.stages

    def snapshot(self) -> GameStateSnapshot:
        s = self.session.state
        return GameStateSnapshot(
            current_stage_index=s.current_stage_index,
            total_stages=s.total_stages,
            cumulative_score=s.cumulative_score,
            cumulative_errors=s.cumulative_errors,
            cumulative_accuracy=s.cumulative_accuracy,
            status=s.status,
        )

    def recomputed_totals(self) -> tuple[int, int]:
        """(score, errors) recomputed from the completed stages, for consistency checks."""
        divisor = self._stage_options["time_bonus_divisor"]
        return (
            compute_total_score(self.stages, time_bonus_divisor=divisor),
            compute_total_errors(self.stages),
        )

    def summary(self) -> GameSummary:
        """Final totals, history, rating and achievements of a completed game."""
        self._require_status("completed", "summarize")
        return rating_service.build_summary(self.snapshot(), self.session.history)

    # --- Transitions ---

    def start(self) -> GameStateSnapshot:
        """intro -> playing, starting at stage 1."""
        self._require_status("intro", "start")
        if not self.stages:
            raise ContractViolation("cannot start a game with no stages")

        state = self.session.state
        state.current_stage_index = 1
        state.total_stages = len(self.stages)
        state.cumulative_score = 0
        state.cumulative_errors = 0
        state.cumulative_accuracy = 0
        state.status = "playing"
        self.session.history = []

        logger.info("Game started with %d stages", state.total_stages)
        self._open_stage()
        return self.snapshot()

    def _complete_stage(self, result: ScoreResult, submission: dict[str, str]) -> None:
        # Only reached through the active stage controller's completion event.
        self._require_status("playing", "complete a stage")
        state = self.session.state
        if result.stage != state.current_stage_index:
            raise ContractViolation(
                f"result for stage {result.stage} while stage {state.current_stage_index} is current"
            )
        if state.current_stage_index > state.total_stages:
            raise ContractViolation("no stage left to complete")

        stage = self.stages[state.current_stage_index - 1]
        if stage.completed:
            raise ContractViolation(f"stage {stage.sequence_number} is already completed")

        stage.completed = True
        stage.submission = dict(submission)
        stage.time_remaining = result.time_remaining
        stage.timed_out = result.timed_out
        self.session.history.append(result)

        stages_before = state.current_stage_index - 1
        state.cumulative_score += result.score
        state.cumulative_errors += result.error_count
        state.cumulative_accuracy = running_accuracy(state.cumulative_accuracy, stages_before, result.accuracy)

        logger.info(
            "Stage %d complete: score=%d accuracy=%d%% errors=%d",
            result.stage, result.score, result.accuracy, result.error_count,
        )

        if state.current_stage_index < state.total_stages:
            state.current_stage_index += 1
            self._open_stage()
        else:
            state.status = "completed"
            self.active_stage = None
            logger.info(
                "Game complete: score=%d accuracy=%d%% errors=%d",
                state.cumulative_score, state.cumulative_accuracy, state.cumulative_errors,
            )

    def quit(self) -> GameStateSnapshot:
        """Abandon the game in progress and go back to the intro screen."""
        self._require_status("playing", "quit")
        logger.info("Game quit at stage %d", self.session.state.current_stage_index)
        self._reset()
        return self.snapshot()

    def restart(self) -> GameStateSnapshot:
        """completed -> intro with a fresh copy of every stage."""
        self._require_status("completed", "restart")
        logger.info("Game restarted")
        self._reset()
        return self.snapshot()

    # --- Internals ---

    def _open_stage(self) -> None:
        stage = self.stages[self.session.state.current_stage_index - 1]
        controller = StageController(
            stage,
            lambda result: self._on_stage_complete(controller, result),
            **self._stage_options,
        )
        self.active_stage = controller

    def _on_stage_complete(self, controller: StageController, result: ScoreResult) -> None:
        if controller is not self.active_stage:
            raise ContractViolation(f"stale completion event for stage {result.stage}")
        self._complete_stage(result, controller.submission)

    def _reset(self) -> None:
        if self.active_stage is not None:
            self.active_stage.cancel()
            self.active_stage = None
        self.session.reset(self.store.load_stages())

    def _require_status(self, expected: GameStatus, action: str) -> None:
        if self.session.state.status != expected:
            raise ContractViolation(f"cannot {action} while game is {self.session.state.status}")
