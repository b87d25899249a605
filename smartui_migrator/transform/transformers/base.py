"""Base classes for all transformers.

Each transformer receives the original file content and a TransformContext
and returns a TransformationResult. Transformers never raise for content
they cannot migrate; they return the content unchanged with a warning.
"""

from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from typing import Callable

from smartui_migrator.transform.types import (
    RuleOutcome,
    TransformationResult,
    TransformationWarning,
    TransformContext,
)

# A rewrite rule: pure function of (source, context).
Rule = Callable[[str, TransformContext], RuleOutcome]


class Transformer(ABC):
    """Abstract base class for all transformers."""

    #: Human-readable name for this transformer
    name: str = ""

    #: File suffixes / names this transformer accepts; empty means any
    handles_suffixes: tuple[str, ...] = ()
    handles_names: tuple[str, ...] = ()

    def handles(self, file_path: str) -> bool:
        """True when this transformer knows how to rewrite the given file."""
        if not self.handles_suffixes and not self.handles_names:
            return True
        path = PurePosixPath(file_path)
        return path.name in self.handles_names or path.suffix in self.handles_suffixes

    @abstractmethod
    def transform(self, source: str, context: TransformContext) -> TransformationResult:
        """Rewrite one file.

        Args:
            source: Full file content as a string.
            context: Platform, framework, language and the file's path.

        Returns:
            The rewritten content with warnings and the number of snapshot
            call sites rewritten.
        """
        ...


class RuleTransformer(Transformer):
    """Transformer defined by an ordered tuple of rules.

    Order is imports, then call sites, then options: later rules may match
    text introduced by earlier ones.
    """

    rules: tuple[Rule, ...] = ()

    def transform(self, source: str, context: TransformContext) -> TransformationResult:
        return apply_rules(self.rules, source, context)


def apply_rules(
    rules: tuple[Rule, ...],
    source: str,
    context: TransformContext,
) -> TransformationResult:
    content = source
    warnings: list[TransformationWarning] = []
    count = 0
    for rule in rules:
        outcome = rule(content, context)
        content = outcome.content
        warnings.extend(outcome.warnings)
        count += outcome.snapshot_count
    return TransformationResult(content=content, warnings=warnings, snapshot_count=count)
