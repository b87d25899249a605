"""Python ecosystem reader (requirements.txt).

Entry point: find_anchors(repo_dir, tables) -> list[AnchorResult]
"""

from smartui_migrator.detector.python.requirements import find_anchors, read_packages

__all__ = ["find_anchors", "read_packages"]
