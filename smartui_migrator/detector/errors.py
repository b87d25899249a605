"""Typed fatal detection errors.

These are the only conditions the detector raises. Each carries a fixed,
user-facing message; callers catch DetectionError once at the outermost
boundary and map it to an exit code.
"""

from typing import Iterable

from smartui_migrator.platforms import Platform


class DetectionError(Exception):
    """Base class for detection-fatal errors."""

    message: str = "Detection failed."

    def __init__(self, message: str | None = None):
        self.message = message or type(self).message
        super().__init__(self.message)


class PlatformNotDetectedError(DetectionError):
    message = (
        "Could not detect a supported visual testing platform. "
        "Please run this tool from the root of your project."
    )


class MultiplePlatformsDetectedError(DetectionError):
    message = (
        "Multiple visual testing platforms were detected. The migration tool "
        "supports migrating from only one platform at a time."
    )

    def __init__(self, platforms: Iterable[Platform] = (), message: str | None = None):
        self.platforms: list[Platform] = list(platforms)
        super().__init__(message)


_MISMATCH_MESSAGES: dict[Platform, str] = {
    Platform.PERCY: (
        "Found Percy API calls in your code, but no Percy dependency was found "
        "in your package.json. Please ensure your project's dependencies are "
        "correctly installed before running the migration."
    ),
    Platform.APPLITOOLS: (
        "Found Applitools API calls in your code, but no Applitools dependency "
        "was found in your package.json or pom.xml. Please ensure your "
        "project's dependencies are correctly installed before running the "
        "migration."
    ),
    Platform.SAUCE_LABS: (
        "Found Sauce Labs Visual API calls in your code, but no Sauce Labs "
        "dependency was found in your package.json or requirements.txt. Please "
        "ensure your project's dependencies are correctly installed before "
        "running the migration."
    ),
}

_MISMATCH_DEFAULT = (
    "Found visual testing API calls in your code, but no corresponding "
    "dependency was found. Please ensure your project's dependencies are "
    "correctly installed before running the migration."
)


class MismatchedSignalsError(DetectionError):
    """Source code uses a platform API that no manifest or config declares."""

    message = _MISMATCH_DEFAULT

    def __init__(self, platform: Platform | str):
        self.platform = platform
        super().__init__(_MISMATCH_MESSAGES.get(platform, _MISMATCH_DEFAULT))
