"""Platform, framework and language detection.

Public API:
    detect(project_root, tables, max_file_size, multi_detection)
        -> DetectionResult, or MultiDetectionResult in multi-detection mode
    detect_all(project_root, tables, max_file_size) -> MultiDetectionResult
    detect_selected(project_root, platform, framework, language) -> DetectionResult

Errors (all DetectionError subclasses):
    PlatformNotDetectedError, MultiplePlatformsDetectedError,
    MismatchedSignalsError
"""

from smartui_migrator.detector.errors import (
    DetectionError,
    MismatchedSignalsError,
    MultiplePlatformsDetectedError,
    PlatformNotDetectedError,
)
from smartui_migrator.detector.orchestrator import detect, detect_all, detect_selected
from smartui_migrator.detector.types import (
    AnchorResult,
    DetectionCandidate,
    DetectionEvidence,
    DetectionFiles,
    DetectionResult,
    Evidence,
    FrameworkEvidence,
    MultiDetectionResult,
)

__all__ = [
    "AnchorResult",
    "DetectionCandidate",
    "DetectionError",
    "DetectionEvidence",
    "DetectionFiles",
    "DetectionResult",
    "Evidence",
    "FrameworkEvidence",
    "MismatchedSignalsError",
    "MultiDetectionResult",
    "MultiplePlatformsDetectedError",
    "PlatformNotDetectedError",
    "detect",
    "detect_all",
    "detect_selected",
]
