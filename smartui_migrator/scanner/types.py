"""Types for the scanner module."""

from dataclasses import dataclass, field

from smartui_migrator.platforms import Framework, Platform


@dataclass
class FrameworkScore:
    """Scorer output for one framework.

    files: project-relative paths where at least one signature fired.
    signatures: the regex patterns that fired, in table order.
    """

    framework: Framework
    score: float = 0.0
    files: list[str] = field(default_factory=list)
    signatures: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "framework": self.framework.value,
            "score": round(self.score, 2),
            "files": self.files,
            "signatures": self.signatures,
        }


@dataclass
class PlatformScore:
    """Cold-search score: sum over files of distinct markers present."""

    platform: Platform
    score: int = 0
    files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "platform": self.platform.value,
            "score": self.score,
            "files": self.files,
        }
