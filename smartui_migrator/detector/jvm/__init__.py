"""JVM ecosystem reader (Maven).

Entry point: find_anchors(repo_dir) -> list[AnchorResult]
"""

from smartui_migrator.detector.jvm.maven import find_anchors, read_coordinates

__all__ = ["find_anchors", "read_coordinates"]
