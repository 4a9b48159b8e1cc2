"""Factory helpers for constructing notifiers and stores from configuration."""
from __future__ import annotations

import importlib
from typing import Any, Dict, List, Optional

from .config import ConfigurationError, PipelineSettings
from .notify import LoggingNotifier, Notifier
from .store import CDRStore


def _load_class(path: str):
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ConfigurationError(f"Invalid class path '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Could not import module '{module_name}'") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_name}' does not define '{attr}'") from exc


def _instantiate(component_cfg: Dict[str, Any], kind: str):
    class_path = component_cfg.get("class")
    if not class_path:
        raise ConfigurationError(f"{kind} configuration missing required 'class' field")

    options = component_cfg.get("options", {}) or {}
    component_cls = _load_class(class_path)
    try:
        return component_cls(**options)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Could not construct {kind} '{class_path}': {exc}") from exc


def build_notifiers(settings: PipelineSettings) -> List[Notifier]:
    """Instantiate the configured notifiers, falling back to logging only."""

    notifiers: List[Notifier] = [_instantiate(cfg, "Notifier") for cfg in settings.notifiers]
    if not notifiers:
        notifiers.append(LoggingNotifier())
    return notifiers


def build_store(settings: PipelineSettings) -> Optional[CDRStore]:
    """Instantiate the configured store, if any."""

    if not settings.store:
        return None
    return _instantiate(settings.store, "Store")
