from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..errors import InputValidationError

FONT_SIZES = (
    "tiny",
    "scriptsize",
    "footnotesize",
    "small",
    "normalsize",
    "large",
    "Large",
)


@dataclass(frozen=True)
class Theme:
    """Named bundle of table styling defaults.

    ``extras`` carries fields the pipeline does not interpret itself; the
    ``packages`` key, when present, lists preamble lines added to every
    document rendered with the theme.
    """

    name: str
    shading_color: str = "blue!10"
    header_bold: bool = True
    font_size: Optional[str] = None
    striped: bool = True
    extras: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InputValidationError("Theme name must be a non-empty string")
        if self.font_size is not None and self.font_size not in FONT_SIZES:
            raise InputValidationError(
                f"Unknown font size {self.font_size!r}; expected one of {', '.join(FONT_SIZES)}"
            )
        frozen = {k: tuple(v) if isinstance(v, list) else v for k, v in self.extras.items()}
        object.__setattr__(self, "extras", MappingProxyType(frozen))

    def replace(self, **changes: Any) -> "Theme":
        """Return a copy with ``changes`` applied; ``None`` values are ignored."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return dataclasses.replace(self, **changes) if changes else self

    def describe(self) -> str:
        lines = [
            f"Theme: {self.name}",
            f"  Row shading: {self.shading_color if self.striped else 'none'}",
            f"  Header bold: {self.header_bold}",
            f"  Font size: {self.font_size or 'normalsize'}",
        ]
        for key, value in self.extras.items():
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)
