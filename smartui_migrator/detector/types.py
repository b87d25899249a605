"""Shared types for the detector module.

All detector outputs conform to DetectionResult (single-platform mode) or
MultiDetectionResult (multi-detection mode). AnchorResult is the
intermediate value produced by the manifest and config-file readers.
"""

from dataclasses import dataclass, field
from typing import Optional

from smartui_migrator.platforms import UNKNOWN, Framework, Language, Platform


def _value(item) -> Optional[str]:
    if item is None:
        return None
    return getattr(item, "value", item)


@dataclass(frozen=True)
class Evidence:
    """Why a decision was made: where the signal came from and what matched.

    source: e.g. "package.json", "pom.xml", "config-file", "content-scan".
    match: the dependency name, file name, or "magic-strings".
    """

    source: str
    match: str

    def to_dict(self) -> dict:
        return {"source": self.source, "match": self.match}


CONTENT_SCAN_EVIDENCE = Evidence(source="content-scan", match="magic-strings")


@dataclass(frozen=True)
class AnchorResult:
    """High-confidence signal from a manifest or named config file.

    platform is UNKNOWN when no anchor was found; framework and language are
    absent for config-file anchors.
    """

    platform: Platform | str = UNKNOWN
    magic_strings: tuple[str, ...] = ()
    framework: Optional[Framework] = None
    language: Optional[Language] = None
    evidence: Optional[Evidence] = None

    @property
    def is_unknown(self) -> bool:
        return self.platform == UNKNOWN

    def to_dict(self) -> dict:
        return {
            "platform": _value(self.platform),
            "magic_strings": list(self.magic_strings),
            "framework": _value(self.framework),
            "language": _value(self.language),
            "evidence": self.evidence.to_dict() if self.evidence else None,
        }


@dataclass(frozen=True)
class FrameworkEvidence:
    files: tuple[str, ...] = ()
    signatures: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"files": list(self.files), "signatures": list(self.signatures)}


@dataclass(frozen=True)
class DetectionEvidence:
    platform: Evidence
    framework: FrameworkEvidence = FrameworkEvidence()

    def to_dict(self) -> dict:
        return {
            "platform": self.platform.to_dict(),
            "framework": self.framework.to_dict(),
        }


@dataclass(frozen=True)
class DetectionFiles:
    """Project-relative POSIX paths grouped by artifact kind."""

    config: tuple[str, ...] = ()
    source: tuple[str, ...] = ()
    ci: tuple[str, ...] = ()
    package_manager: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "config": list(self.config),
            "source": list(self.source),
            "ci": list(self.ci),
            "package_manager": list(self.package_manager),
        }


@dataclass(frozen=True)
class DetectionResult:
    """Terminal detection output for a project.

    platform is always a concrete Platform; the orchestrator turns an
    unresolved anchor into a typed DetectionError before building this.
    """

    platform: Platform
    framework: Framework
    language: Language
    test_type: str
    files: DetectionFiles
    evidence: DetectionEvidence

    def __post_init__(self):
        if not isinstance(self.platform, Platform):
            raise ValueError(f"DetectionResult requires a concrete platform, got {self.platform!r}")

    def to_dict(self) -> dict:
        return {
            "platform": self.platform.value,
            "framework": self.framework.value,
            "language": self.language.value,
            "test_type": self.test_type,
            "files": self.files.to_dict(),
            "evidence": self.evidence.to_dict(),
        }


@dataclass
class DetectionCandidate:
    """One option surfaced by multi-detection mode.

    confidence is "high" for manifest/config anchors and "low" for
    content-scan findings.
    """

    name: str
    confidence: str
    evidence: Evidence
    frameworks: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "confidence": self.confidence,
            "evidence": self.evidence.to_dict(),
            "frameworks": self.frameworks,
            "languages": self.languages,
        }


@dataclass
class MultiDetectionResult:
    platforms: list[DetectionCandidate] = field(default_factory=list)
    frameworks: list[DetectionCandidate] = field(default_factory=list)
    languages: list[DetectionCandidate] = field(default_factory=list)

    @property
    def total_detections(self) -> int:
        return len(self.platforms) + len(self.frameworks) + len(self.languages)

    def to_dict(self) -> dict:
        return {
            "platforms": [c.to_dict() for c in self.platforms],
            "frameworks": [c.to_dict() for c in self.frameworks],
            "languages": [c.to_dict() for c in self.languages],
            "total_detections": self.total_detections,
        }
