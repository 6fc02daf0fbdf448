"""Scoring engine - accuracy, per-stage score and error counts.

All functions here are pure: they read a stage definition and a submission
map and never mutate either.

Accuracy and error count treat blank fields differently: a blank field
that has an expected value lowers accuracy but is not an error, and it is
neither rewarded nor penalized in the stage score.
"""

import math

from dataentry.config import settings
from dataentry.schemas.stage import StageDefinition


def compute_accuracy(submission: dict[str, str], expected: dict[str, str]) -> int:
    """Percentage (0-100) of scorable expected fields matched exactly."""
    if not submission:
        return 0

    total_fields = 0
    correct = 0
    for key, value in expected.items():
        if not value:
            continue  # not scorable
        total_fields += 1
        if submission.get(key) == value:
            correct += 1

    if total_fields == 0:
        return 0
    return round_half_up(correct / total_fields * 100)


def compute_field_score(stage: StageDefinition, submission: dict[str, str]) -> int:
    """Reward/penalty pass over the expected fields, clamped at zero."""
    score = 0
    for key, value in stage.expected_values.items():
        submitted = submission.get(key, "")
        if submitted == value:
            score += stage.points_per_correct_field
        elif submitted:
            score -= stage.penalty_per_incorrect_field
    return max(0, score)


def compute_time_bonus(time_remaining: int | None, divisor: int | None = None) -> int:
    """One bonus point per ``divisor`` whole seconds left. Zero for untimed stages."""
    if not time_remaining or time_remaining <= 0:
        return 0
    return time_remaining // (divisor or settings.TIME_BONUS_DIVISOR)


def compute_stage_score(
    stage: StageDefinition,
    submission: dict[str, str],
    time_remaining: int | None = None,
    *,
    time_bonus_divisor: int | None = None,
) -> int:
    """Score for one stage: clamped field score, then the time bonus on top.

    The bonus is added after the clamp, so a fast stage with nothing right
    still earns its bonus points. ``time_remaining`` is ignored for untimed
    stages.
    """
    score = compute_field_score(stage, submission)
    if stage.is_timed:
        score += compute_time_bonus(time_remaining, time_bonus_divisor)
    return score


def compute_error_count(stage: StageDefinition, submission: dict[str, str]) -> int:
    """Number of expected fields with a non-empty, wrong submission."""
    errors = 0
    for key, value in stage.expected_values.items():
        submitted = submission.get(key, "")
        if submitted and submitted != value:
            errors += 1
    return errors


def compute_total_score(stages: list[StageDefinition], *, time_bonus_divisor: int | None = None) -> int:
    """Recompute the cumulative score from the completed stages' stored submissions."""
    total = 0
    for stage in stages:
        if not stage.completed:
            continue
        if stage.timed_out:
            continue  # a timeout forfeits the stage's points
        total += compute_stage_score(
            stage, stage.submission, stage.time_remaining, time_bonus_divisor=time_bonus_divisor
        )
    return total


def compute_total_errors(stages: list[StageDefinition]) -> int:
    """Recompute the cumulative error count from the completed stages."""
    return sum(compute_error_count(stage, stage.submission) for stage in stages if stage.completed)


def running_accuracy(previous: int, stages_completed_before: int, accuracy: int) -> int:
    """Fold one more stage accuracy into the running mean, rounding at every step.

    Because each update rounds, the result can drift by one point from a
    flat average of the same per-stage accuracies.
    """
    return round_half_up((previous * stages_completed_before + accuracy) / (stages_completed_before + 1))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (Python's round() goes to even)."""
    return math.floor(value + 0.5)
