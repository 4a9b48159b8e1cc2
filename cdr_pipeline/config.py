"""Configuration helpers for the CDR cleaning pipeline."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pytz

from .ingestion.loaders import DEFAULT_PATTERN
from .processor import DEFAULT_LOCAL_TIMEZONE
from .reporting import DEFAULT_ALERT_RATIO, DEFAULT_MIN_ALERT_COUNT

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}
_MODES = {"sequential", "concurrent"}
_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Configuration file '{file_path}' is not valid JSON: {exc}") from exc
    else:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - dependency optional
            raise ConfigurationError(
                "YAML configuration requires the 'pyyaml' package to be installed"
            ) from exc
        data = yaml.safe_load(text)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping at the top level")
    return data


def iter_enabled_notifier_configs(config: Mapping[str, Any]) -> Iterable[Dict[str, Any]]:
    notifiers = config.get("notifiers", []) or []
    if not isinstance(notifiers, list):
        raise ConfigurationError("'notifiers' must be a list of mappings with a 'class' entry")
    for notifier in notifiers:
        if not isinstance(notifier, dict):
            raise ConfigurationError(f"Notifier entry {notifier!r} must be a mapping with a 'class' entry")
        if notifier.get("enabled", True):
            yield notifier
        else:
            LOGGER.debug("Skipping disabled notifier %s", notifier.get("name") or notifier.get("class"))


@dataclass
class PipelineSettings:
    """Typed view over the configuration mapping."""

    input_dir: Optional[Path] = None
    file_pattern: str = DEFAULT_PATTERN
    backup_dir: Optional[Path] = None
    delete_processed: bool = False
    local_timezone: str = DEFAULT_LOCAL_TIMEZONE
    alert_min_count: int = DEFAULT_MIN_ALERT_COUNT
    alert_ratio: float = DEFAULT_ALERT_RATIO
    mode: str = "sequential"
    max_workers: Optional[int] = None
    store: Optional[Dict[str, Any]] = None
    notifiers: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "PipelineSettings":
        mode = str(config.get("mode", "sequential")).lower()
        if mode not in _MODES:
            raise ConfigurationError(f"Unknown processing mode '{mode}'. Expected one of {sorted(_MODES)}")

        try:
            alert_min_count = int(config.get("alert_min_count", DEFAULT_MIN_ALERT_COUNT))
            alert_ratio = float(config.get("alert_ratio", DEFAULT_ALERT_RATIO))
            max_workers = config.get("max_workers")
            max_workers = int(max_workers) if max_workers is not None else None
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid numeric configuration value: {exc}") from exc

        if alert_min_count < 0 or alert_ratio < 0:
            raise ConfigurationError("Alert thresholds must not be negative")

        local_timezone = str(config.get("local_timezone") or DEFAULT_LOCAL_TIMEZONE)
        try:
            pytz.timezone(local_timezone)
        except pytz.UnknownTimeZoneError as exc:
            raise ConfigurationError(f"Unknown timezone '{local_timezone}'") from exc

        store = config.get("store")
        if store is not None and not isinstance(store, dict):
            raise ConfigurationError("'store' must be a mapping with a 'class' entry")

        return cls(
            input_dir=_optional_path(config.get("input_dir")),
            file_pattern=str(config.get("file_pattern") or DEFAULT_PATTERN),
            backup_dir=_optional_path(config.get("backup_dir")),
            delete_processed=_as_bool("delete_processed", config.get("delete_processed", False)),
            local_timezone=local_timezone,
            alert_min_count=alert_min_count,
            alert_ratio=alert_ratio,
            mode=mode,
            max_workers=max_workers,
            store=store,
            notifiers=list(iter_enabled_notifier_configs(config)),
        )


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
        return value.strip().lower() in _TRUE_STRINGS
    if value is None:
        return False
    raise ConfigurationError(f"'{key}' must be a boolean, got {value!r}")


def _optional_path(value: Any) -> Optional[Path]:
    if value in (None, ""):
        return None
    return Path(value)


__all__ = ["ConfigurationError", "PipelineSettings", "iter_enabled_notifier_configs", "load_configuration"]
