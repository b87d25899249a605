"""Transformer library.

Each transformer migrates one kind of file for one platform. All of them
implement the Transformer interface; the dispatcher picks one per file from
TRANSFORMER_REGISTRY.
"""

from smartui_migrator.platforms import Language, Platform
from smartui_migrator.transform.transformers.base import RuleTransformer, Transformer
from smartui_migrator.transform.transformers.config import (
    ApplitoolsConfigTransformer,
    ConfigTransformer,
    PercyConfigTransformer,
    SauceConfigTransformer,
)
from smartui_migrator.transform.transformers.execution import CiTransformer, ManifestTransformer
from smartui_migrator.transform.transformers.java import (
    ApplitoolsJavaTransformer,
    PercyJavaTransformer,
    SauceJavaTransformer,
)
from smartui_migrator.transform.transformers.js_applitools import ApplitoolsJavaScriptTransformer
from smartui_migrator.transform.transformers.js_percy import PercyJavaScriptTransformer
from smartui_migrator.transform.transformers.js_sauce import SauceJavaScriptTransformer
from smartui_migrator.transform.transformers.python import (
    ApplitoolsPythonTransformer,
    PercyPythonTransformer,
    SaucePythonTransformer,
)
from smartui_migrator.transform.types import ArtifactKind

# Registry: (Language, Platform) for source files, (ArtifactKind, Platform)
# for everything else -> transformer class
TRANSFORMER_REGISTRY: dict[tuple[Language | ArtifactKind, Platform], type[Transformer]] = {
    (Language.JAVASCRIPT, Platform.PERCY): PercyJavaScriptTransformer,
    (Language.JAVASCRIPT, Platform.APPLITOOLS): ApplitoolsJavaScriptTransformer,
    (Language.JAVASCRIPT, Platform.SAUCE_LABS): SauceJavaScriptTransformer,
    (Language.JAVA, Platform.PERCY): PercyJavaTransformer,
    (Language.JAVA, Platform.APPLITOOLS): ApplitoolsJavaTransformer,
    (Language.JAVA, Platform.SAUCE_LABS): SauceJavaTransformer,
    (Language.PYTHON, Platform.PERCY): PercyPythonTransformer,
    (Language.PYTHON, Platform.APPLITOOLS): ApplitoolsPythonTransformer,
    (Language.PYTHON, Platform.SAUCE_LABS): SaucePythonTransformer,
    (ArtifactKind.CONFIG, Platform.PERCY): PercyConfigTransformer,
    (ArtifactKind.CONFIG, Platform.APPLITOOLS): ApplitoolsConfigTransformer,
    (ArtifactKind.CONFIG, Platform.SAUCE_LABS): SauceConfigTransformer,
    (ArtifactKind.PACKAGE_MANAGER, Platform.PERCY): ManifestTransformer,
    (ArtifactKind.PACKAGE_MANAGER, Platform.APPLITOOLS): ManifestTransformer,
    (ArtifactKind.PACKAGE_MANAGER, Platform.SAUCE_LABS): ManifestTransformer,
    (ArtifactKind.CI, Platform.PERCY): CiTransformer,
    (ArtifactKind.CI, Platform.APPLITOOLS): CiTransformer,
    (ArtifactKind.CI, Platform.SAUCE_LABS): CiTransformer,
}

__all__ = [
    "TRANSFORMER_REGISTRY",
    "Transformer",
    "RuleTransformer",
    "ConfigTransformer",
    "PercyJavaScriptTransformer",
    "ApplitoolsJavaScriptTransformer",
    "SauceJavaScriptTransformer",
    "PercyJavaTransformer",
    "ApplitoolsJavaTransformer",
    "SauceJavaTransformer",
    "PercyPythonTransformer",
    "ApplitoolsPythonTransformer",
    "SaucePythonTransformer",
    "PercyConfigTransformer",
    "ApplitoolsConfigTransformer",
    "SauceConfigTransformer",
    "ManifestTransformer",
    "CiTransformer",
]
