"""Compile options and configuration loading (.zephyr.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

CONFIG_FILENAME = ".zephyr.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class CompileOptions:
    """Switches honoured by :class:`zephyr.orchestrator.Compiler`."""

    minify: bool = False
    minify_html: Optional[bool] = None
    minify_css: Optional[bool] = None
    minify_js: Optional[bool] = None
    dev: bool = False
    props: Dict[str, Any] = field(default_factory=dict)
    leakage_checks: Optional[List[str]] = None

    def minify_targets(self) -> Tuple[bool, bool, bool]:
        """Return the effective (html, css, js) minification flags."""

        def _pick(value: Optional[bool]) -> bool:
            return self.minify if value is None else value

        return _pick(self.minify_html), _pick(self.minify_css), _pick(self.minify_js)


@dataclass
class LoggingConfig:
    """The optional ``logging`` section."""

    enabled: bool = False
    verbose: bool = False
    file: Optional[Path] = None


@dataclass
class ZephyrConfig:
    """Settings defined in .zephyr.yml."""

    root: Path
    options: CompileOptions = field(default_factory=CompileOptions)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Path) -> ZephyrConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ZephyrConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    options = CompileOptions(
        minify=_as_bool(data.get("minify")) or False,
        minify_html=_as_bool(data.get("minify_html")),
        minify_css=_as_bool(data.get("minify_css")),
        minify_js=_as_bool(data.get("minify_js")),
        dev=_as_bool(data.get("dev")) or False,
        props=dict(_as_dict(data.get("props"))),
    )

    leakage_data = data.get("leakage")
    if leakage_data is not None and not isinstance(leakage_data, dict):
        raise ConfigError("'leakage' must be a mapping")
    if leakage_data and "enabled" in leakage_data:
        options.leakage_checks = _as_str_list(leakage_data.get("enabled"))

    return ZephyrConfig(root=root, options=options, logging=_logging_config(data.get("logging"), root))


def _logging_config(value: Any, root: Path) -> LoggingConfig:
    if value is None:
        return LoggingConfig()
    if not isinstance(value, dict):
        raise ConfigError("'logging' must be a mapping")
    log_file = _as_str(value.get("file"))
    return LoggingConfig(
        enabled=True,
        verbose=_as_bool(value.get("verbose")) or False,
        file=(root / log_file) if log_file else None,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CompileOptions",
    "ConfigError",
    "LoggingConfig",
    "ZephyrConfig",
    "load_config",
]
