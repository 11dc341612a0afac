"""Cell-level formatting: bold, italic, text colour and cell background.

Formats are applied to the sanitized grid before rendering, so every later
rewrite (header groups, row collapsing) sees the styled cell text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from ..errors import ConfigurationError, InputValidationError
from ..sanitize import SanitizedTable
from .features import resolve_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellFormat:
    """Styling applied to the cells selected by ``rows`` x ``cols``.

    ``rows`` are 1-based body rows and ``cols`` are 1-based positions or
    column names; ``None`` selects all of them. With a ``condition`` only
    cells whose original value satisfies it are styled.
    """

    rows: Optional[Sequence[int]] = None
    cols: Optional[Sequence[Union[int, str]]] = None
    bold: bool = False
    italic: bool = False
    color: Optional[str] = None
    background: Optional[str] = None
    condition: Optional[Callable[[Any], Any]] = None

    def __post_init__(self) -> None:
        if isinstance(self.rows, int):
            object.__setattr__(self, "rows", (self.rows,))
        if isinstance(self.cols, (int, str)):
            object.__setattr__(self, "cols", (self.cols,))
        if self.rows is not None:
            rows = tuple(self.rows)
            for r in rows:
                if isinstance(r, bool) or not isinstance(r, int) or r < 1:
                    raise InputValidationError(f"Format rows must be positive integers, got {r!r}")
            object.__setattr__(self, "rows", rows)
        if self.cols is not None:
            cols = tuple(self.cols)
            for c in cols:
                if isinstance(c, bool) or not isinstance(c, (int, str)):
                    raise InputValidationError(f"Format cols must be positions or names, got {c!r}")
            object.__setattr__(self, "cols", cols)
        for attr in ("color", "background"):
            value = getattr(self, attr)
            if value is not None and (not isinstance(value, str) or not value.strip()):
                raise InputValidationError(f"`{attr}` must be a non-empty colour string")
        if self.condition is not None and not callable(self.condition):
            raise InputValidationError("`condition` must be callable")
        if not (self.bold or self.italic or self.color or self.background):
            raise InputValidationError("A cell format needs at least one of bold, italic, color or background")

    def style(self, text: str, braced: bool = False) -> str:
        """Wrap ``text``; ``braced`` shields the result from siunitx number parsing."""
        out = text
        if self.italic:
            out = f"\\textit{{{out}}}"
        if self.bold:
            out = f"\\textbf{{{out}}}"
        if self.color:
            out = f"\\textcolor{{{self.color}}}{{{out}}}"
        if self.background:
            out = f"\\cellcolor{{{self.background}}}{out}"
        if braced and out != text:
            out = "{" + out + "}"
        return out

    def describe(self) -> str:
        lines = ["Cell format:"]
        if self.rows is not None:
            lines.append(f"  Rows: {', '.join(map(str, self.rows))}")
        if self.cols is not None:
            lines.append(f"  Cols: {', '.join(map(str, self.cols))}")
        styles = [s for s, on in (("bold", self.bold), ("italic", self.italic)) if on]
        if self.color:
            styles.append(f"color={self.color}")
        if self.background:
            styles.append(f"background={self.background}")
        lines.append(f"  Styles: {', '.join(styles)}")
        if self.condition is not None:
            lines.append("  Conditional: yes")
        return "\n".join(lines)


Formats = Union[CellFormat, Sequence[CellFormat], None]


def t2f_format(rows=None, cols=None, bold=False, italic=False, color=None, background=None, condition=None) -> CellFormat:
    return CellFormat(rows=rows, cols=cols, bold=bold, italic=italic, color=color,
                      background=background, condition=condition)


def t2f_highlight(condition: Callable[[Any], Any], background: str = "yellow!30", bold: bool = False,
                  color: Optional[str] = None, cols=None) -> CellFormat:
    """Background-highlight every cell whose value satisfies ``condition``."""
    if not callable(condition):
        raise InputValidationError("`condition` must be callable")
    return CellFormat(cols=cols, condition=condition, background=background, bold=bold, color=color)


def t2f_bold_col(cols) -> CellFormat:
    if cols is None or (not isinstance(cols, (int, str)) and len(cols) == 0):
        raise InputValidationError("`cols` must name at least one column")
    return CellFormat(cols=cols, bold=True)


def t2f_italic_col(cols) -> CellFormat:
    if cols is None or (not isinstance(cols, (int, str)) and len(cols) == 0):
        raise InputValidationError("`cols` must name at least one column")
    return CellFormat(cols=cols, italic=True)


def t2f_color_row(rows, background: str) -> CellFormat:
    if rows is None or (not isinstance(rows, int) and len(rows) == 0):
        raise InputValidationError("`rows` must list at least one row")
    return CellFormat(rows=rows, background=background)


def as_formats(formatting: Formats) -> List[CellFormat]:
    if formatting is None:
        return []
    if isinstance(formatting, CellFormat):
        return [formatting]
    out = list(formatting)
    for f in out:
        if not isinstance(f, CellFormat):
            raise InputValidationError("`formatting` must contain CellFormat objects")
    return out


def _matches(fmt: CellFormat, value: Any) -> bool:
    try:
        return bool(fmt.condition(value))
    except (TypeError, ValueError) as e:
        logger.debug("Format condition rejected %r: %s", value, e)
        return False


def format_targets(fmt: CellFormat, table: SanitizedTable) -> List[Tuple[int, int]]:
    """1-indexed ``(row, col)`` pairs selected by ``rows`` and ``cols``, before conditions."""
    names = list(table.columns.values())
    if fmt.cols is None:
        cols = list(range(1, table.n_columns + 1))
    else:
        cols = resolve_columns(fmt.cols, names, table.columns, what="format")
    if fmt.rows is None:
        rows = list(range(1, table.n_rows + 1))
    else:
        bad = [r for r in fmt.rows if r > table.n_rows]
        if bad:
            raise ConfigurationError(f"Format row(s) {bad} out of range for {table.n_rows} row(s)")
        rows = sorted(set(fmt.rows))
    return [(r, c) for r in rows for c in cols]


def apply_formatting(
    table: SanitizedTable,
    formatting: Formats,
    values: Optional[pd.DataFrame] = None,
    decimal_positions: Sequence[int] = (),
) -> SanitizedTable:
    """Return a copy of ``table`` with every format applied in order.

    Conditions see the original value from ``values`` when given, else the
    sanitized cell text.
    """
    formats = as_formats(formatting)
    if not formats:
        return table
    targets = [(fmt, format_targets(fmt, table)) for fmt in formats]
    cells = [list(row) for row in table.cells]
    decimal = set(decimal_positions)
    for fmt, cells_at in targets:
        for r, c in cells_at:
            if fmt.condition is not None:
                value = values.iat[r - 1, c - 1] if values is not None else table.cells[r - 1][c - 1]
                if not _matches(fmt, value):
                    continue
            cells[r - 1][c - 1] = fmt.style(cells[r - 1][c - 1], braced=c in decimal)
    return replace(table, cells=cells)
