"""Stage service - loads the stage catalog from YAML and hands out fresh copies.

Each ``*.yaml`` file under the stage data directory holds one stage. Parsed
definitions are cached; ``load_stages`` always returns deep copies so a new
game never sees a previous game's completion flags or submissions.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from dataentry.config import settings
from dataentry.core.errors import StageCatalogError
from dataentry.schemas.stage import StageDefinition, StageSummary

logger = logging.getLogger("dataentry.services.stages")


class StageService:
    def __init__(self, data_dir: Path | None = None):
        self.data_dir = Path(data_dir or settings.STAGE_DATA_DIR)
        self._cache: list[StageDefinition] | None = None

    def load_stage_file(self, file_path: Path) -> StageDefinition:
        """Parse and validate one stage YAML file."""
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise StageCatalogError(f"Cannot read stage file {file_path}: {e}") from e

        if not isinstance(raw, dict):
            raise StageCatalogError(f"Stage file {file_path} does not contain a mapping")

        try:
            return StageDefinition.model_validate(raw)
        except ValidationError as e:
            raise StageCatalogError(f"Invalid stage file {file_path}: {e}") from e

    def _catalog(self) -> list[StageDefinition]:
        if self._cache is not None:
            return self._cache

        if not self.data_dir.is_dir():
            raise StageCatalogError(f"Stage directory not found: {self.data_dir}")

        stages = [self.load_stage_file(p) for p in sorted(self.data_dir.glob("*.yaml"))]
        if not stages:
            raise StageCatalogError(f"No stage files in {self.data_dir}")

        stages.sort(key=lambda s: s.sequence_number)
        numbers = [s.sequence_number for s in stages]
        if numbers != list(range(1, len(stages) + 1)):
            raise StageCatalogError(f"Stage sequence numbers must run 1..{len(stages)}, got {numbers}")

        logger.info("Loaded %d stages from %s", len(stages), self.data_dir)
        self._cache = stages
        return stages

    def load_stages(self) -> list[StageDefinition]:
        """Fresh, ordered copies of every stage, ready for a new game."""
        return [stage.model_copy(deep=True) for stage in self._catalog()]

    def list_stages(self) -> list[StageSummary]:
        """Basic info about every stage, in play order."""
        return [
            StageSummary(
                sequence_number=s.sequence_number,
                name=s.name,
                description=s.description,
                field_count=len(s.fields),
                is_timed=s.is_timed,
            )
            for s in self._catalog()
        ]

    def clear_cache(self) -> None:
        self._cache = None


stage_service = StageService()
