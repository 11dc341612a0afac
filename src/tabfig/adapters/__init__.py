from .registry import (
    Adapter,
    adapt,
    default_name,
    get_adapter,
    list_adapters,
    register_adapter,
    to_frame,
    unregister_adapter,
)
from . import builtin as _builtin  # auto-register built-ins

__all__ = [
    "Adapter",
    "adapt",
    "default_name",
    "get_adapter",
    "list_adapters",
    "register_adapter",
    "to_frame",
    "unregister_adapter",
]
