"""Rating service - end-of-game performance rating and achievements."""

from dataentry.schemas.game import GameStateSnapshot, GameSummary
from dataentry.schemas.stage import ScoreResult

# (min accuracy, min score, rating), best first
RATING_TIERS = [
    (90, 100, "Master"),
    (80, 80, "Expert"),
    (70, 60, "Proficient"),
    (60, 40, "Apprentice"),
]
DEFAULT_RATING = "Beginner"

SPEED_DEMON_SECONDS = 30


class RatingService:
    @staticmethod
    def get_rating(total_accuracy: int, total_score: int) -> str:
        """Best rating whose accuracy and score thresholds are both met."""
        for min_accuracy, min_score, name in RATING_TIERS:
            if total_accuracy >= min_accuracy and total_score >= min_score:
                return name
        return DEFAULT_RATING

    @staticmethod
    def get_achievements(history: list[ScoreResult], total_accuracy: int, total_score: int) -> list[str]:
        """Badges earned over a finished game, in display order."""
        achievements = []
        if total_accuracy >= 90:
            achievements.append("Perfect Precision")
        if any((r.time_remaining or 0) > SPEED_DEMON_SECONDS for r in history):
            achievements.append("Speed Demon")
        if sum(r.error_count for r in history) == 0:
            achievements.append("Flawless Entry")
        if total_score >= 100:
            achievements.append("High Scorer")
        achievements.append("Challenge Completed")
        return achievements

    def build_summary(self, state: GameStateSnapshot, history: list[ScoreResult]) -> GameSummary:
        return GameSummary(
            state=state,
            history=list(history),
            rating=self.get_rating(state.cumulative_accuracy, state.cumulative_score),
            achievements=self.get_achievements(history, state.cumulative_accuracy, state.cumulative_score),
        )


rating_service = RatingService()
