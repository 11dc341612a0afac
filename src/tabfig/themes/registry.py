from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Union

from ..errors import ConfigurationError, InputValidationError
from .builtin import BUILTIN_THEMES, MINIMAL
from .theme import Theme

logger = logging.getLogger(__name__)

ThemeLike = Union[Theme, str, None]


class ThemeRegistry:
    """Process-wide store of custom themes plus the current-theme pointer.

    Built-in themes are read-only; custom registrations live in a separate
    mapping that is searched first. All reads and writes go through one
    re-entrant lock.
    """

    def __init__(self, builtins: Optional[Mapping[str, Theme]] = None, fallback: Theme = MINIMAL) -> None:
        self._builtins: Mapping[str, Theme] = dict(BUILTIN_THEMES if builtins is None else builtins)
        self._custom: Dict[str, Theme] = {}
        self._current: Optional[Theme] = None
        self._fallback = fallback
        self._lock = threading.RLock()

    @property
    def fallback(self) -> Theme:
        return self._fallback

    def is_builtin(self, name: str) -> bool:
        return name in self._builtins

    def register(self, theme: Theme, name: Optional[str] = None, overwrite: bool = False) -> bool:
        if not isinstance(theme, Theme):
            raise InputValidationError("`theme` must be a Theme object")
        key = name or theme.name
        with self._lock:
            if key in self._builtins:
                raise ConfigurationError(f"Cannot register theme with built-in name '{key}'")
            if key in self._custom and not overwrite:
                raise ConfigurationError(
                    f"Theme '{key}' is already registered; pass overwrite=True to replace it"
                )
            self._custom[key] = theme
        logger.info("Theme '%s' registered successfully", key)
        return True

    def unregister(self, name: str) -> bool:
        with self._lock:
            removed = self._custom.pop(name, None)
            if removed is not None and self._current is removed:
                self._current = None
        if removed is None:
            logger.info("Theme '%s' not found among custom themes", name)
            return False
        logger.info("Theme '%s' unregistered", name)
        return True

    def clear(self) -> int:
        with self._lock:
            n = len(self._custom)
            if self._current is not None and any(self._current is t for t in self._custom.values()):
                self._current = None
            self._custom.clear()
        logger.info("Cleared %d custom theme(s)", n)
        return n

    def lookup(self, name: str) -> Theme:
        with self._lock:
            if name in self._custom:
                return self._custom[name]
            if name in self._builtins:
                return self._builtins[name]
        raise ConfigurationError(
            f"Unknown theme '{name}'. Available: {', '.join(self.list_themes())}"
        )

    def list_themes(self, builtin_only: bool = False) -> List[str]:
        with self._lock:
            names = list(self._builtins)
            if not builtin_only:
                names.extend(n for n in self._custom if n not in self._builtins)
        return names

    def _coerce(self, theme: ThemeLike) -> Optional[Theme]:
        if theme is None:
            return None
        if isinstance(theme, Theme):
            return theme
        if isinstance(theme, str):
            return self.lookup(theme)
        raise InputValidationError("`theme` must be a Theme, a theme name or None")

    def set_current(self, theme: ThemeLike) -> Optional[Theme]:
        """Set (or clear with ``None``) the current theme; returns the previous one."""
        resolved = self._coerce(theme)
        with self._lock:
            previous = self._current
            self._current = resolved
        return previous

    def get_current(self) -> Optional[Theme]:
        with self._lock:
            return self._current

    def resolve(self, theme: ThemeLike = None, **overrides: Any) -> Theme:
        """Return the effective theme for one call.

        A call-time ``theme`` replaces the current theme as a whole; non-None
        ``overrides`` (``shading_color``, ``header_bold``, ``font_size``,
        ``striped``) then win field by field.
        """
        base = self._coerce(theme)
        if base is None:
            base = self.get_current() or self._fallback
        return base.replace(**overrides)


_DEFAULT_REGISTRY = ThemeRegistry()


def default_registry() -> ThemeRegistry:
    return _DEFAULT_REGISTRY


def register_theme(theme: Theme, name: Optional[str] = None, overwrite: bool = False) -> bool:
    return _DEFAULT_REGISTRY.register(theme, name=name, overwrite=overwrite)


def unregister_theme(name: str) -> bool:
    return _DEFAULT_REGISTRY.unregister(name)


def clear_themes() -> int:
    return _DEFAULT_REGISTRY.clear()


def get_theme(name: str) -> Theme:
    return _DEFAULT_REGISTRY.lookup(name)


def list_themes(builtin_only: bool = False) -> List[str]:
    return _DEFAULT_REGISTRY.list_themes(builtin_only=builtin_only)


def set_current_theme(theme: ThemeLike) -> Optional[Theme]:
    return _DEFAULT_REGISTRY.set_current(theme)


def get_current_theme() -> Optional[Theme]:
    return _DEFAULT_REGISTRY.get_current()
