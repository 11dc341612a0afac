"""Escaping helpers that make column names, cells and filenames safe for LaTeX."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

import numpy as np
import pandas as pd

_UNSAFE_NAME = re.compile(r"[^A-Za-z0-9_]")
_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9_-]")
_RESERVED = re.compile(r"[#%&$_{}~^\\]")
_LINE_BREAK = re.compile(r"\s*[\r\n]+\s*")

# Characters that cannot take a plain backslash prefix get their text-mode command.
_ESCAPES = {
    "#": r"\#",
    "%": r"\%",
    "&": r"\&",
    "$": r"\$",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
    "\\": r"\textbackslash{}",
}


@dataclass
class SanitizedTable:
    """Markup-safe view of a data frame."""

    columns: Dict[str, str]
    headers: List[str]
    cells: List[List[str]] = field(default_factory=list)

    @property
    def n_rows(self) -> int:
        return len(self.cells)

    @property
    def n_columns(self) -> int:
        return len(self.headers)


def sanitize_column_names(names: Iterable[Any]) -> List[str]:
    """Map every name onto ``[A-Za-z0-9_]``, keeping order and length.

    Names that do not start with a letter are prefixed with ``X`` so the
    result is also a valid identifier. Distinct inputs may collide; the
    mapping is deterministic.
    """
    out: List[str] = []
    for name in names:
        safe = _UNSAFE_NAME.sub("_", str(name))
        if not safe or not safe[0].isalpha():
            safe = "X" + safe
        out.append(safe)
    return out


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, set, np.ndarray)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def escape_latex(text: str) -> str:
    """Escape the reserved set; line breaks collapse to a single space.

    Rendered rows are rewritten line by line, so a cell must never span
    more than one source line.
    """
    text = _LINE_BREAK.sub(" ", text)
    return _RESERVED.sub(lambda m: _ESCAPES[m.group(0)], text)


def sanitize_table_cells(cells: Iterable[Any]) -> List[str]:
    """Escape the LaTeX reserved set in every cell.

    Non-string values are converted with ``str``; missing values become the
    empty string. Each call escapes exactly once, so the output must not be
    fed back through this function within one pipeline run.
    """
    return ["" if _is_missing(c) else escape_latex(str(c)) for c in cells]


def sanitize_filename(name: str) -> str:
    """Replace characters that are unsafe in a path segment with ``_``."""
    safe = _UNSAFE_FILENAME.sub("_", str(name))
    return safe or "table"


def format_cell(value: Any, float_format: str | None = None) -> Any:
    if float_format and isinstance(value, (float, np.floating)) and not _is_missing(value):
        return format(float(value), float_format)
    return value


def sanitize_frame(df: pd.DataFrame, float_format: str | None = None) -> SanitizedTable:
    """Build a :class:`SanitizedTable` from ``df``.

    Header labels are the sanitized column names escaped for markup, since
    ``_`` is itself a reserved character.
    """
    safe_names = sanitize_column_names(df.columns)
    columns = {str(orig): safe for orig, safe in zip(df.columns, safe_names)}
    headers = sanitize_table_cells(safe_names)
    cells = [
        sanitize_table_cells(format_cell(v, float_format) for v in row)
        for row in df.itertuples(index=False, name=None)
    ]
    return SanitizedTable(columns=columns, headers=headers, cells=cells)
