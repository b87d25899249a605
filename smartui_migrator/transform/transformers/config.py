"""Platform config file -> .smartui.json.

Each transformer reads one platform config (YAML, JSON, or a JS/TS module
whose exported object literal is read with tree-sitter) and renders the
SmartUI config as 2-space indented JSON. A config that cannot be parsed
still yields a usable default, with a warning saying why.
"""

import json
import logging
import re
from abc import abstractmethod
from pathlib import PurePosixPath
from typing import Any, Optional

import yaml

from smartui_migrator.core.config import get_settings
from smartui_migrator.detector.config_files import CONFIG_PATTERNS
from smartui_migrator.platforms import Platform
from smartui_migrator.transform.transformers import js_ast
from smartui_migrator.transform.transformers.base import Transformer
from smartui_migrator.transform.transformers.javascript import JS_SUFFIXES
from smartui_migrator.transform.types import (
    TransformationResult,
    TransformationWarning,
    TransformContext,
)

logger = logging.getLogger(__name__)

CONFIG_VERSION = "1.0"

DEFAULT_WEB_VIEWPORTS = [[1280, 720], [768, 1024], [375, 667]]
DEFAULT_BROWSERS = ["chrome", "firefox", "safari"]
DEFAULT_DEVICES = ["iPhone X", "Samsung Galaxy S10"]
DEFAULT_PERCY_VIEWPORTS = [[1280], [768], [375]]
DEFAULT_MIN_HEIGHT = 600

_RESOLUTION = re.compile(r"^(\d+)x(\d+)$")


def parse_screen_resolution(value: Any) -> Optional[list[int]]:
    """`"1920x1080"` -> [1920, 1080]; anything else -> None."""
    if not isinstance(value, str):
        return None
    m = _RESOLUTION.match(value.strip())
    if m is None:
        return None
    return [int(m.group(1)), int(m.group(2))]


def load_config(source: str, file_path: str) -> dict:
    """Parse a config file into a dict.

    Raises:
        ValueError: The content is malformed or is not a mapping.
        yaml.YAMLError: The YAML could not be parsed.
    """
    suffix = PurePosixPath(file_path).suffix
    if suffix in JS_SUFFIXES:
        tree = js_ast.parse(source, file_path)
        if tree.root_node.has_error:
            raise ValueError("syntax error in JavaScript configuration")
        obj = js_ast.find_exported_object(tree.root_node)
        if obj is None:
            raise ValueError("no exported configuration object found")
        data = js_ast.literal_value(obj)
    elif suffix == ".json":
        data = json.loads(source)
    else:
        data = yaml.safe_load(source)
    if not isinstance(data, dict):
        raise ValueError("configuration is not a mapping")
    return data


def _mapping(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _append_unique(items: list, value: Any) -> None:
    if value not in items:
        items.append(value)


class ConfigTransformer(Transformer):
    """Base for the per-platform config transformers.

    Subclasses implement `build`, returning the SmartUI config dict and the
    warnings for settings that were not carried over.
    """

    platform: Platform

    def __init__(self, project_name: Optional[str] = None):
        self.project_name = project_name or get_settings().smartui_project_name

    def handles(self, file_path: str) -> bool:
        patterns = CONFIG_PATTERNS.get(self.platform, ())
        name = PurePosixPath(file_path).name
        return file_path in patterns or name in {PurePosixPath(p).name for p in patterns}

    def transform(self, source: str, context: TransformContext) -> TransformationResult:
        try:
            config = load_config(source, context.file_path)
            smartui, warnings = self.build(config)
        except (ValueError, yaml.YAMLError) as e:
            logger.warning("Could not parse %s: %s", context.file_path, e)
            return TransformationResult(
                content=self.render(self.default_config()),
                warnings=[
                    TransformationWarning(
                        message=f"Failed to parse {self.platform.value} configuration: {e}",
                        details="The configuration file may be malformed or use unsupported syntax.",
                    )
                ],
            )
        return TransformationResult(content=self.render(smartui), warnings=warnings)

    @staticmethod
    def render(config: dict) -> str:
        return json.dumps(config, indent=2) + "\n"

    def base_config(self) -> dict:
        return {
            "version": CONFIG_VERSION,
            "projectName": self.project_name,
            "web": {"browsers": [], "viewports": []},
            "mobile": {"devices": [], "orientation": "portrait"},
        }

    def default_config(self) -> dict:
        config = self.base_config()
        config["web"] = {"browsers": list(DEFAULT_BROWSERS), "viewports": [list(v) for v in DEFAULT_WEB_VIEWPORTS]}
        config["mobile"]["devices"] = list(DEFAULT_DEVICES)
        return config

    def fill_defaults(self, config: dict) -> dict:
        """Nothing targetable was found: fall back to the default matrix."""
        web, mobile = config["web"], config["mobile"]
        if not web["browsers"] and not web["viewports"] and not mobile["devices"]:
            defaults = self.default_config()
            config["web"], config["mobile"] = defaults["web"], defaults["mobile"]
        return config

    @abstractmethod
    def build(self, config: dict) -> tuple[dict, list[TransformationWarning]]:
        ...


# ---------------------------------------------------------------------------
# Percy
# ---------------------------------------------------------------------------

class PercyConfigTransformer(ConfigTransformer):
    name = "percy-config"
    platform = Platform.PERCY

    def base_config(self) -> dict:
        return {
            "version": CONFIG_VERSION,
            "projectName": self.project_name,
            "web": {"viewports": [], "allowedHostnames": []},
        }

    def default_config(self) -> dict:
        config = self.base_config()
        config["web"]["viewports"] = [list(v) for v in DEFAULT_PERCY_VIEWPORTS]
        config["web"]["minHeight"] = DEFAULT_MIN_HEIGHT
        return config

    def build(self, config: dict) -> tuple[dict, list[TransformationWarning]]:
        out = self.base_config()
        web = out["web"]
        warnings: list[TransformationWarning] = []
        snapshot = _mapping(config.get("snapshot"))
        discovery = _mapping(config.get("discovery"))

        widths = snapshot.get("widths")
        if isinstance(widths, list):
            web["viewports"] = [[w] for w in widths if isinstance(w, int)]
        if not web["viewports"]:
            web["viewports"] = [list(v) for v in DEFAULT_PERCY_VIEWPORTS]

        min_height = snapshot.get("min-height", snapshot.get("minHeight"))
        if isinstance(min_height, int):
            web["minHeight"] = min_height

        hostnames = discovery.get("allowed-hostnames", discovery.get("allowedHostnames"))
        if isinstance(hostnames, list):
            web["allowedHostnames"] = [h for h in hostnames if isinstance(h, str)]

        if snapshot.get("percy-css") or snapshot.get("percyCSS"):
            warnings.append(
                TransformationWarning(
                    message=(
                        "Percy-specific CSS was detected. SmartUI has no global CSS "
                        "injection, so `percy-css` was not migrated."
                    ),
                    details="Hide or restyle the affected elements with ignoreDOM in the snapshot options.",
                )
            )
        if snapshot.get("enable-javascript") or snapshot.get("enableJavaScript"):
            warnings.append(
                TransformationWarning(
                    message="Percy JavaScript execution setting detected. SmartUI handles JavaScript execution differently.",
                    details="JavaScript execution is controlled at the test level in SmartUI, not globally in configuration.",
                )
            )
        return out, warnings


# ---------------------------------------------------------------------------
# Applitools
# ---------------------------------------------------------------------------

# key -> (message, details)
APPLITOOLS_UNMAPPED: dict[str, tuple[str, str]] = {
    "appName": (
        "appName is configured on the SmartUI dashboard or via CLI arguments, not in the config file. This setting was not migrated.",
        "Set the app name when running SmartUI tests using CLI arguments or dashboard configuration.",
    ),
    "batchName": (
        "batchName is configured on the SmartUI dashboard or via CLI arguments, not in the config file. This setting was not migrated.",
        "Set the batch name when running SmartUI tests using CLI arguments or dashboard configuration.",
    ),
    "batchId": (
        "batchId is automatically generated by SmartUI and cannot be pre-configured. This setting was not migrated.",
        "SmartUI will automatically generate batch IDs for test runs.",
    ),
    "apiKey": (
        "apiKey should be set via environment variables or CLI arguments for security. This setting was not migrated.",
        "Set the project token using the PROJECT_TOKEN environment variable.",
    ),
    "storybookUrl": (
        "storybookUrl is not used by smartui-storybook. This setting was not migrated.",
        "smartui-storybook takes the Storybook URL or build directory on the command line.",
    ),
    "storybook": (
        "Storybook-specific configuration properties are not used by smartui-storybook. These settings were not migrated.",
        "smartui-storybook uses the standard Storybook configuration.",
    ),
    "serverUrl": (
        "serverUrl is configured via CLI arguments or environment variables. This setting was not migrated.",
        "Set the server URL using CLI arguments or environment variables when running SmartUI tests.",
    ),
}


class ApplitoolsConfigTransformer(ConfigTransformer):
    name = "applitools-config"
    platform = Platform.APPLITOOLS

    def build(self, config: dict) -> tuple[dict, list[TransformationWarning]]:
        out = self.base_config()
        web, mobile = out["web"], out["mobile"]

        entries = config.get("browser") or []
        if isinstance(entries, dict):
            entries = [entries]
        for entry in entries if isinstance(entries, list) else []:
            if not isinstance(entry, dict):
                continue
            if entry.get("width") and entry.get("height") and entry.get("name"):
                _append_unique(web["browsers"], entry["name"])
                web["viewports"].append([entry["width"], entry["height"]])
            elif entry.get("deviceName"):
                mobile["devices"].append(entry["deviceName"])

        warnings = [
            TransformationWarning(message=message, details=details)
            for key, (message, details) in APPLITOOLS_UNMAPPED.items()
            if key in config
        ]
        return self.fill_defaults(out), warnings


# ---------------------------------------------------------------------------
# Sauce Labs Visual
# ---------------------------------------------------------------------------

SAUCE_UNMAPPED: dict[str, tuple[str, str]] = {
    "build": (
        "Sauce Labs' `build` property was detected. In SmartUI, the build name is typically set via the `--buildName` CLI flag or an environment variable in your CI/CD pipeline.",
        "Set the build name when running SmartUI tests using CLI arguments or environment variables.",
    ),
    "name": (
        "Sauce Labs' `name` property was detected. In SmartUI, the test name is typically set via the `--testName` CLI flag or environment variable.",
        "Set the test name when running SmartUI tests using CLI arguments or environment variables.",
    ),
    "tags": (
        "Sauce Labs' `tags` property was detected. In SmartUI, tags are typically set via the `--tags` CLI flag or environment variable.",
        "Set tags when running SmartUI tests using CLI arguments or environment variables.",
    ),
    "region": (
        "Sauce Labs' `region` property was detected. In SmartUI, the region is typically set via the `--region` CLI flag or environment variable.",
        "Set the region when running SmartUI tests using CLI arguments or environment variables.",
    ),
    "username": (
        "Sauce Labs' `username` property was detected. In SmartUI, authentication is typically handled via API keys set as environment variables.",
        "Set LT_USERNAME and LT_ACCESS_KEY as environment variables.",
    ),
    "accessKey": (
        "Sauce Labs' `accessKey` property was detected. In SmartUI, authentication is typically handled via API keys set as environment variables.",
        "Set LT_USERNAME and LT_ACCESS_KEY as environment variables.",
    ),
}


def nested_sauce_config(config: dict) -> dict:
    """The Sauce block of a JS config: saucelabs, sauceVisual, e2e.saucelabs or use.sauceVisual."""
    for candidate in (
        config.get("saucelabs"),
        config.get("sauceVisual"),
        _mapping(config.get("e2e")).get("saucelabs"),
        _mapping(config.get("use")).get("sauceVisual"),
    ):
        if isinstance(candidate, dict):
            return candidate
    return {}


class SauceConfigTransformer(ConfigTransformer):
    name = "sauce-config"
    platform = Platform.SAUCE_LABS

    def _collect(self, settings: dict, out: dict) -> None:
        web, mobile = out["web"], out["mobile"]
        browser = settings.get("browserName") or settings.get("browser")
        if isinstance(browser, str):
            _append_unique(web["browsers"], browser)
        resolution = parse_screen_resolution(settings.get("screenResolution"))
        if resolution:
            web["viewports"].append(resolution)
        if isinstance(settings.get("deviceName"), str):
            mobile["devices"].append(settings["deviceName"])
        for entry in settings.get("browsers") or []:
            if not isinstance(entry, dict):
                continue
            if isinstance(entry.get("browserName"), str):
                _append_unique(web["browsers"], entry["browserName"])
            resolution = parse_screen_resolution(entry.get("screenResolution"))
            if resolution:
                web["viewports"].append(resolution)
        for entry in settings.get("devices") or []:
            if isinstance(entry, dict) and isinstance(entry.get("deviceName"), str):
                mobile["devices"].append(entry["deviceName"])

    def build(self, config: dict) -> tuple[dict, list[TransformationWarning]]:
        out = self.base_config()
        suites = config.get("suites")
        for suite in suites if isinstance(suites, list) else []:
            if isinstance(suite, dict):
                self._collect(suite, out)
                self._collect(_mapping(suite.get("settings")), out)
        self._collect(_mapping(config.get("settings")), out)
        nested = nested_sauce_config(config)
        self._collect(nested, out)

        warnings: list[TransformationWarning] = []
        for section in (config, _mapping(config.get("metadata")), _mapping(config.get("settings")), nested):
            for key, (message, details) in SAUCE_UNMAPPED.items():
                if key in section:
                    warnings.append(TransformationWarning(message=message, details=details))
        return self.fill_defaults(out), warnings
