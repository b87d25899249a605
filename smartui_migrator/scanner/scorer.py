"""Framework and platform scoring over scanned files.

score_frameworks: weighted regex signatures, each counted at most once per
    file; the strictly highest total wins, ties and all-zero scores fall back
    to the ecosystem default.
score_platforms: cold-search ranking by number of distinct vocabulary
    markers per file; ties break on the fixed platform priority.
infer_language: derived from the extensions of the scanned files.
"""

import logging
from pathlib import Path
from typing import Iterable

from smartui_migrator.platforms import UNKNOWN, Framework, Language, Platform
from smartui_migrator.scanner.orchestrator import read_source
from smartui_migrator.scanner.tables import DEFAULT_TABLES, DetectionTables
from smartui_migrator.scanner.types import FrameworkScore, PlatformScore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Language
# ---------------------------------------------------------------------------

def infer_language(files: Iterable[str]) -> Language:
    suffixes = {Path(f).suffix for f in files}
    if ".java" in suffixes:
        return Language.JAVA
    if ".py" in suffixes or ".robot" in suffixes:
        return Language.PYTHON
    return Language.JAVASCRIPT


# ---------------------------------------------------------------------------
# Framework
# ---------------------------------------------------------------------------

def score_all_frameworks(
    project_root: Path,
    files: Iterable[str],
    tables: DetectionTables = DEFAULT_TABLES,
) -> list[FrameworkScore]:
    """Score every framework in table order.

    Signatures are matched against the file's relative path and its content,
    so path-based signatures such as `.stories.js` fire too.
    """
    project_root = Path(project_root)
    scores = {fw: FrameworkScore(framework=fw) for fw in tables.framework_signatures}

    for rel in files:
        content = read_source(project_root / rel)
        if content is None:
            continue
        text = f"{rel}\n{content}"

        for framework, signatures in tables.framework_signatures.items():
            entry = scores[framework]
            fired = False
            for sig in signatures:
                if sig.pattern.search(text):
                    entry.score += sig.weight
                    fired = True
                    if sig.pattern.pattern not in entry.signatures:
                        entry.signatures.append(sig.pattern.pattern)
            if fired:
                entry.files.append(rel)

    return list(scores.values())


def score_frameworks(
    project_root: Path,
    files: Iterable[str],
    language: Language,
    tables: DetectionTables = DEFAULT_TABLES,
) -> FrameworkScore:
    """Pick the winning framework for the given files and language."""
    files = list(files)
    scores = score_all_frameworks(project_root, files, tables)
    default = tables.default_frameworks.get(language, Framework.CYPRESS)

    if not scores:
        return FrameworkScore(framework=default)

    top = max(s.score for s in scores)
    leaders = [s for s in scores if s.score == top]

    if top <= 0 or len(leaders) > 1:
        logger.debug(
            "Framework scores inconclusive (top=%.2f, leaders=%d); defaulting to %s",
            top, len(leaders), default.value,
        )
        for s in scores:
            if s.framework == default:
                return s
        return FrameworkScore(framework=default)

    winner = leaders[0]
    logger.debug("Framework %s scored %.2f over %d files", winner.framework.value, top, len(files))
    return winner


# ---------------------------------------------------------------------------
# Platform (cold search)
# ---------------------------------------------------------------------------

def score_platforms(
    project_root: Path,
    files: Iterable[str],
    tables: DetectionTables = DEFAULT_TABLES,
) -> tuple[Platform | str, list[PlatformScore]]:
    """Rank platforms by distinct markers per file.

    Returns (winner, scores). The winner is UNKNOWN when every score is zero.
    """
    project_root = Path(project_root)
    scores = [PlatformScore(platform=p) for p in tables.platform_priority]

    for rel in files:
        content = read_source(project_root / rel)
        if content is None:
            continue
        for entry in scores:
            hits = sum(1 for m in tables.markers_for(entry.platform) if m in content)
            if hits:
                entry.score += hits
                entry.files.append(rel)

    best = max(scores, key=lambda s: s.score, default=None)
    if best is None or best.score == 0:
        return UNKNOWN, scores
    # max() keeps the first maximal entry, which is the priority order.
    return best.platform, scores
