"""Migration engine: detect the platform, then plan the SmartUI rewrite.

The pipeline is:
  1. Detect platform, framework and language (detector).
  2. Transform every detected file (transform).
  3. Return a MigrationPlan; writing the changes is the caller's decision.

Detection errors (PlatformNotDetectedError, MultiplePlatformsDetectedError,
MismatchedSignalsError) propagate out of run() after being logged, so the
caller can map them to an exit code.

In multi-detection mode run() stops after detection: the plan carries the
candidate set and no summary. The caller picks a candidate, turns it into a
DetectionResult with select() and calls plan() with it.
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from smartui_migrator.core.config import Settings, get_settings
from smartui_migrator.core.logging import bind_run_context, configure_structlog
from smartui_migrator.detector import (
    DetectionError,
    DetectionResult,
    MultiDetectionResult,
    detect,
    detect_all,
    detect_selected,
)
from smartui_migrator.platforms import Framework, Language, Platform
from smartui_migrator.scanner import DEFAULT_TABLES, DetectionTables
from smartui_migrator.transform import TransformationSummary, transform_project

logger = logging.getLogger(__name__)


@dataclass
class MigrationPlan:
    detection: Optional[DetectionResult] = None
    summary: Optional[TransformationSummary] = None
    candidates: Optional[MultiDetectionResult] = None

    @property
    def needs_selection(self) -> bool:
        return self.detection is None

    def to_dict(self) -> dict:
        return {
            "detection": self.detection.to_dict() if self.detection else None,
            "summary": self.summary.to_dict() if self.summary else None,
            "candidates": self.candidates.to_dict() if self.candidates else None,
        }


class MigrationEngine:
    def __init__(self, settings: Settings, tables: DetectionTables = DEFAULT_TABLES):
        self.settings = settings
        self.tables = tables

    def detect(self, project_root: Path) -> DetectionResult | MultiDetectionResult:
        return detect(
            Path(project_root),
            self.tables,
            self.settings.max_file_size,
            multi_detection=self.settings.multi_detection,
        )

    def detect_all(self, project_root: Path) -> MultiDetectionResult:
        return detect_all(Path(project_root), self.tables, self.settings.max_file_size)

    def select(
        self,
        project_root: Path,
        platform: Platform | str,
        framework: Framework | str | None = None,
        language: Language | str | None = None,
    ) -> DetectionResult:
        return detect_selected(
            Path(project_root),
            platform,
            framework,
            language,
            self.tables,
            self.settings.max_file_size,
        )

    def plan(self, project_root: Path, detection: DetectionResult) -> MigrationPlan:
        summary = transform_project(Path(project_root), detection, self.settings)
        return MigrationPlan(detection=detection, summary=summary)

    def run(self, project_root: Path, run_id: Optional[str] = None) -> MigrationPlan:
        """Detect and plan in one step.

        Raises:
            DetectionError: No single platform could be resolved.
        """
        project_root = Path(project_root)
        run_id = run_id or str(uuid.uuid4())
        bind_run_context(run_id, str(project_root))
        logger.info("Starting migration run: run_id=%s root=%s", run_id, project_root)

        try:
            detection = self.detect(project_root)
        except DetectionError as exc:
            logger.error("Detection failed: %s: %s", type(exc).__name__, exc)
            raise

        if isinstance(detection, MultiDetectionResult):
            logger.info(
                "Migration run awaiting selection: %d platform candidates",
                len(detection.platforms),
            )
            return MigrationPlan(candidates=detection)

        plan = self.plan(project_root, detection)
        logger.info(
            "Migration run complete: %s -> SmartUI, %d files to modify, %d to create",
            detection.platform.value,
            plan.summary.files_to_modify,
            plan.summary.files_to_create,
        )
        return plan


def create_engine(settings: Optional[Settings] = None) -> MigrationEngine:
    """Build an engine with logging configured from settings."""
    settings = settings or get_settings()
    configure_structlog(debug=settings.debug)
    return MigrationEngine(settings)
