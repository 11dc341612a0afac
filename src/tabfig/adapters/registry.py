from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import pandas as pd

from ..errors import InputValidationError

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], bool]
Extractor = Callable[[Any], pd.DataFrame]


@dataclass
class Adapter:
    tag: str
    predicate: Predicate
    fn: Extractor


_ADAPTERS: Dict[str, Adapter] = {}


def register_adapter(tag: str, predicate: Predicate, fn: Optional[Extractor] = None):
    """Map ``tag`` to an extraction function for objects matching ``predicate``.

    Usable directly or as a decorator on ``fn``. Adapters registered later
    are tried first, so a new registration can shadow a built-in one.
    """
    key = tag.lower()

    def deco(func: Extractor) -> Extractor:
        _ADAPTERS.pop(key, None)
        _ADAPTERS[key] = Adapter(tag=key, predicate=predicate, fn=func)
        logger.debug("Registered table adapter '%s'", key)
        return func

    if fn is None:
        return deco
    return deco(fn)


def unregister_adapter(tag: str) -> bool:
    return _ADAPTERS.pop(tag.lower(), None) is not None


def get_adapter(tag: str) -> Adapter:
    return _ADAPTERS[tag.lower()]


def list_adapters() -> Dict[str, Adapter]:
    return dict(_ADAPTERS)


def find_adapter(x: Any) -> Optional[Adapter]:
    for adapter in reversed(list(_ADAPTERS.values())):
        if adapter.predicate(x):
            return adapter
    return None


def default_name(x: Any, tag: str) -> str:
    """Filename stem for ``x``: its ``name`` when it carries one, else the tag."""
    if isinstance(x, pd.DataFrame):
        name = x.attrs.get("name")
        return str(name) if name else "table"
    if isinstance(x, pd.Series) and x.name is not None:
        return str(x.name)
    if tag in ("ndarray", "mapping", "records"):
        return "table"
    return tag


def adapt(x: Any) -> Tuple[str, pd.DataFrame]:
    """Reduce ``x`` to a non-empty DataFrame; returns ``(tag, frame)``."""
    adapter = find_adapter(x)
    if adapter is None:
        raise InputValidationError(
            f"Cannot build a table from an object of type {type(x).__name__}; "
            "register an adapter with register_adapter()"
        )
    try:
        df = adapter.fn(x)
    except (TypeError, ValueError) as e:
        if isinstance(e, InputValidationError):
            raise
        raise InputValidationError(f"Adapter '{adapter.tag}' could not convert the input: {e}") from e
    if not isinstance(df, pd.DataFrame):
        raise InputValidationError(f"Adapter '{adapter.tag}' did not return a DataFrame")
    if df.shape[1] == 0:
        raise InputValidationError("Input has no columns")
    if df.shape[0] == 0:
        raise InputValidationError("Input has no rows")
    return adapter.tag, df


def to_frame(x: Any) -> pd.DataFrame:
    return adapt(x)[1]
