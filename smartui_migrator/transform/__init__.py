"""Rewrite a detected project for LambdaTest SmartUI.

Public API:
    transform_project(project_root, detection, settings) -> TransformationSummary
    TransformationDispatcher(project_root, detection, settings).transform_file(path, kind)

Changes are returned as proposals; nothing is written to disk.
"""

from smartui_migrator.transform.dispatcher import TransformationDispatcher, transform_project
from smartui_migrator.transform.types import (
    ArtifactKind,
    MigrationFileError,
    ProposedChange,
    TransformationResult,
    TransformationSummary,
    TransformationWarning,
    TransformContext,
)

__all__ = [
    "ArtifactKind",
    "MigrationFileError",
    "ProposedChange",
    "TransformContext",
    "TransformationDispatcher",
    "TransformationResult",
    "TransformationSummary",
    "TransformationWarning",
    "transform_project",
]
