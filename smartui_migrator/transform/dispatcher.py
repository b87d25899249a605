"""Route detected project files to transformers and collect the results.

Routing is a lookup in TRANSFORMER_REGISTRY: source files by
(Language, Platform), config / package-manager / CI files by
(ArtifactKind, Platform). Each file is read, transformed and turned into a
ProposedChange; a file that fails becomes a warning and the run goes on.
Nothing is written to disk.
"""

import dataclasses
import logging
from pathlib import Path, PurePosixPath
from typing import Optional

from smartui_migrator.core.config import Settings, get_settings
from smartui_migrator.detector.types import DetectionResult
from smartui_migrator.platforms import Language
from smartui_migrator.transform.transformers import TRANSFORMER_REGISTRY, ConfigTransformer, Transformer
from smartui_migrator.transform.types import (
    ArtifactKind,
    MigrationFileError,
    ProposedChange,
    TransformationSummary,
    TransformationWarning,
    TransformContext,
)

logger = logging.getLogger(__name__)

# Processing order; files within a kind keep the detector's sorted order.
KIND_ORDER = (ArtifactKind.SOURCE, ArtifactKind.CONFIG, ArtifactKind.PACKAGE_MANAGER, ArtifactKind.CI)


class TransformationDispatcher:
    def __init__(
        self,
        project_root: Path,
        detection: DetectionResult,
        settings: Optional[Settings] = None,
        registry: Optional[dict] = None,
    ):
        self.project_root = Path(project_root)
        self.detection = detection
        self.settings = settings or get_settings()
        self.registry = TRANSFORMER_REGISTRY if registry is None else registry
        self._instances: dict[type, Transformer] = {}

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def language_for(self, rel_path: str) -> Language:
        if PurePosixPath(rel_path).suffix == ".robot":
            return Language.PYTHON
        return self.detection.language

    def transformer_for(self, rel_path: str, kind: ArtifactKind) -> Optional[Transformer]:
        key = self.language_for(rel_path) if kind == ArtifactKind.SOURCE else kind
        cls = self.registry.get((key, self.detection.platform))
        if cls is None:
            return None
        if cls not in self._instances:
            if issubclass(cls, ConfigTransformer):
                self._instances[cls] = cls(project_name=self.settings.smartui_project_name)
            else:
                self._instances[cls] = cls()
        transformer = self._instances[cls]
        return transformer if transformer.handles(rel_path) else None

    def files_of(self, kind: ArtifactKind) -> tuple[str, ...]:
        files = self.detection.files
        return {
            ArtifactKind.SOURCE: files.source,
            ArtifactKind.CONFIG: files.config,
            ArtifactKind.PACKAGE_MANAGER: files.package_manager,
            ArtifactKind.CI: files.ci,
        }[kind]

    # ------------------------------------------------------------------
    # Per-file
    # ------------------------------------------------------------------

    def read(self, rel_path: str) -> str:
        path = self.project_root / rel_path
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise MigrationFileError(rel_path, str(e)) from e

    def transform_file(self, rel_path: str, kind: ArtifactKind) -> Optional[ProposedChange]:
        """Transform one file; None when no transformer handles it.

        Raises:
            MigrationFileError: The file could not be read.
        """
        transformer = self.transformer_for(rel_path, kind)
        if transformer is None:
            logger.debug("No %s transformer for %s; skipping", kind.value, rel_path)
            return None

        original = self.read(rel_path)
        context = TransformContext(
            platform=self.detection.platform,
            framework=self.detection.framework,
            language=self.language_for(rel_path),
            file_path=rel_path,
        )
        result = transformer.transform(original, context)
        result.warnings = [
            w if w.file else dataclasses.replace(w, file=rel_path) for w in result.warnings
        ]

        if kind == ArtifactKind.CONFIG:
            path, action = self.settings.smartui_config_name, "create"
        else:
            path, action = rel_path, "modify"
        logger.debug(
            "%s %s -> %s (%d snapshots, %d warnings)",
            transformer.name, rel_path, path, result.snapshot_count, len(result.warnings),
        )
        return ProposedChange(
            path=path,
            source_path=rel_path,
            kind=kind,
            action=action,
            original=original,
            result=result,
        )

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> TransformationSummary:
        summary = TransformationSummary()
        config_source: Optional[str] = None

        for kind in KIND_ORDER:
            for rel_path in self.files_of(kind):
                if kind == ArtifactKind.CONFIG and config_source is not None:
                    summary.warnings.append(
                        TransformationWarning(
                            message=(
                                f"Multiple {self.detection.platform.value} configuration files found; "
                                f"only {config_source} was migrated."
                            ),
                            details="Merge any remaining settings into .smartui.json by hand.",
                            file=rel_path,
                        )
                    )
                    continue
                try:
                    change = self.transform_file(rel_path, kind)
                except MigrationFileError as e:
                    logger.warning("Skipping %s: %s", rel_path, e.detail)
                    summary.warnings.append(
                        TransformationWarning(message=str(e), details=e.detail, file=rel_path)
                    )
                    continue
                except Exception as e:
                    logger.warning("Transformer failed on %s: %s", rel_path, e, exc_info=True)
                    summary.warnings.append(
                        TransformationWarning(
                            message=f"Failed to transform {rel_path}: {e}",
                            details="The file was left unchanged.",
                            file=rel_path,
                        )
                    )
                    continue
                if change is None:
                    continue
                if kind == ArtifactKind.CONFIG:
                    config_source = rel_path
                summary.changes.append(change)
                summary.warnings.extend(change.result.warnings)

        logger.info(
            "Transformation planned: %d to create, %d to modify, %d snapshots, %d warnings",
            summary.files_to_create,
            summary.files_to_modify,
            summary.snapshot_count,
            len(summary.warnings),
        )
        return summary


def transform_project(
    project_root: Path,
    detection: DetectionResult,
    settings: Optional[Settings] = None,
) -> TransformationSummary:
    """Transform every file the detector listed for `project_root`."""
    return TransformationDispatcher(project_root, detection, settings).run()
