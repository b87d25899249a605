"""Types for the transform module.

TransformationResult is the per-file output of every transformer;
ProposedChange and TransformationSummary are what the dispatcher returns.
Nothing here touches the filesystem: changes are proposals for a caller
to review and write.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from smartui_migrator.platforms import Framework, Language, Platform


class ArtifactKind(str, Enum):
    SOURCE = "source"
    CONFIG = "config"
    PACKAGE_MANAGER = "package_manager"
    CI = "ci"


@dataclass(frozen=True)
class TransformContext:
    platform: Platform
    framework: Framework
    language: Language
    file_path: str = ""


@dataclass(frozen=True)
class TransformationWarning:
    """An advisory about something that could not be migrated verbatim."""

    message: str
    details: Optional[str] = None
    file: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"message": self.message}
        if self.details:
            out["details"] = self.details
        if self.file:
            out["file"] = self.file
        return out


@dataclass
class RuleOutcome:
    """Output of one rewrite rule; rules are folded in order."""

    content: str
    warnings: list[TransformationWarning] = field(default_factory=list)
    snapshot_count: int = 0


@dataclass
class TransformationResult:
    content: str
    warnings: list[TransformationWarning] = field(default_factory=list)
    snapshot_count: int = 0

    def to_dict(self) -> dict:
        return {
            "content": self.content,
            "warnings": [w.to_dict() for w in self.warnings],
            "snapshot_count": self.snapshot_count,
        }


@dataclass
class ProposedChange:
    """One file the migration would create or modify.

    path: where the result goes (the generated config for "create").
    source_path: the project file that was read.
    """

    path: str
    source_path: str
    kind: ArtifactKind
    action: str  # "create" | "modify"
    original: str
    result: TransformationResult

    @property
    def changed(self) -> bool:
        return self.action == "create" or self.result.content != self.original

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "source_path": self.source_path,
            "kind": self.kind.value,
            "action": self.action,
            "changed": self.changed,
            "snapshot_count": self.result.snapshot_count,
            "warnings": [w.to_dict() for w in self.result.warnings],
        }


@dataclass
class TransformationSummary:
    changes: list[ProposedChange] = field(default_factory=list)
    warnings: list[TransformationWarning] = field(default_factory=list)

    @property
    def files_to_create(self) -> int:
        return sum(1 for c in self.changes if c.action == "create")

    @property
    def files_to_modify(self) -> int:
        return sum(1 for c in self.changes if c.action == "modify" and c.changed)

    @property
    def snapshot_count(self) -> int:
        return sum(c.result.snapshot_count for c in self.changes)

    def to_dict(self) -> dict:
        return {
            "changes": [c.to_dict() for c in self.changes],
            "files_to_create": self.files_to_create,
            "files_to_modify": self.files_to_modify,
            "snapshot_count": self.snapshot_count,
            "warnings": [w.to_dict() for w in self.warnings],
        }


class MigrationFileError(Exception):
    """A project file could not be read or decoded."""

    def __init__(self, path: str, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"Could not read {path}: {detail}")
