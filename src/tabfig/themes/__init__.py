from .theme import Theme, FONT_SIZES
from .builtin import BUILTIN_THEMES
from .registry import (
    ThemeRegistry,
    default_registry,
    register_theme,
    unregister_theme,
    clear_themes,
    get_theme,
    list_themes,
    set_current_theme,
    get_current_theme,
)

__all__ = [
    "Theme",
    "FONT_SIZES",
    "BUILTIN_THEMES",
    "ThemeRegistry",
    "default_registry",
    "register_theme",
    "unregister_theme",
    "clear_themes",
    "get_theme",
    "list_themes",
    "set_current_theme",
    "get_current_theme",
]
