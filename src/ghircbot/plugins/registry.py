from __future__ import annotations

import importlib
from typing import Any

from ghircbot.core.errors import AdapterError


def load_adapter(dotted_path: str) -> type:
    """Import "package.module:ClassName" and return the class."""
    try:
        module_path, class_name = dotted_path.split(":", 1)
        module = importlib.import_module(module_path)
        adapter_cls = getattr(module, class_name)
    except (ValueError, ImportError, AttributeError) as exc:
        raise AdapterError(f"Unable to load adapter: {dotted_path}") from exc
    if not isinstance(adapter_cls, type):
        raise AdapterError(f"Adapter is not a class: {dotted_path}")
    return adapter_cls


def build_adapter(dotted_path: str, **kwargs: Any) -> Any:
    adapter_cls = load_adapter(dotted_path)
    try:
        return adapter_cls(**kwargs)
    except TypeError as exc:
        raise AdapterError(f"Cannot construct adapter {dotted_path}: {exc}") from exc
