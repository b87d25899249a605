"""Content scanner: walks a project and finds files containing marker strings.

This is the public entry point for scanning. It:
1. Collects candidate source files (extension filter, ignore list, size cap)
2. Reads each file, skipping unreadable ones
3. Keeps the files whose text contains at least one marker
4. Returns project-relative POSIX paths in sorted traversal order

`glob_files` applies the same ignore list to config/CI/manifest patterns.
"""

import fnmatch
import logging
from pathlib import Path
from typing import Iterable

from smartui_migrator.scanner.tables import DEFAULT_TABLES, DetectionTables

logger = logging.getLogger(__name__)

# Maximum file size to scan (512KB). Larger files are skipped.
MAX_FILE_SIZE = 512 * 1024


def search_content(
    project_root: Path,
    markers: Iterable[str],
    tables: DetectionTables = DEFAULT_TABLES,
    max_file_size: int = MAX_FILE_SIZE,
) -> list[str]:
    """Return relative paths of scannable files containing any marker."""
    project_root = Path(project_root)
    markers = [m for m in markers if m]
    if not markers:
        return []

    files = collect_files(project_root, tables, max_file_size)
    logger.debug("Collected %d scannable files in %s", len(files), project_root)

    matches: list[str] = []
    for path in files:
        content = read_source(path)
        if content is None:
            continue
        if any(marker in content for marker in markers):
            matches.append(relative_posix(path, project_root))

    logger.info(
        "Content search: %d of %d files matched %d markers",
        len(matches), len(files), len(markers),
    )
    return matches


def collect_files(
    project_root: Path,
    tables: DetectionTables = DEFAULT_TABLES,
    max_file_size: int = MAX_FILE_SIZE,
) -> list[Path]:
    """Collect all scannable source files under the project root."""
    files: list[Path] = []

    for path in Path(project_root).rglob("*"):
        if is_ignored(path, project_root, tables):
            continue

        if not path.is_file():
            continue

        if path.suffix not in tables.scannable_extensions:
            continue

        try:
            if path.stat().st_size > max_file_size:
                logger.debug("Skipping large file: %s", path)
                continue
        except OSError:
            continue

        files.append(path)

    return sorted(files)


def glob_files(
    project_root: Path,
    patterns: Iterable[str],
    tables: DetectionTables = DEFAULT_TABLES,
) -> list[str]:
    """Expand glob patterns relative to the root, honouring the ignore list.

    Returns sorted, de-duplicated project-relative POSIX paths of files.
    """
    project_root = Path(project_root)
    found: set[str] = set()
    for pattern in patterns:
        for path in project_root.glob(pattern):
            if not path.is_file() or is_ignored(path, project_root, tables):
                continue
            found.add(relative_posix(path, project_root))
    return sorted(found)


def read_source(path: Path) -> str | None:
    """Read a text file, returning None (and logging) when it cannot be read."""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("Failed to read %s: %s", path, exc)
        return None


def is_ignored(path: Path, project_root: Path, tables: DetectionTables = DEFAULT_TABLES) -> bool:
    try:
        rel = path.relative_to(project_root)
    except ValueError:
        rel = path
    if any(part in tables.ignore_dirs for part in rel.parts[:-1]):
        return True
    if path.is_dir() and path.name in tables.ignore_dirs:
        return True
    return any(fnmatch.fnmatch(path.name, pat) for pat in tables.ignore_files)


def relative_posix(path: Path, project_root: Path) -> str:
    try:
        return path.relative_to(project_root).as_posix()
    except ValueError:
        return path.as_posix()
