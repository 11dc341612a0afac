"""Base tabular markup via pandas' LaTeX writer."""

from __future__ import annotations

import logging
from typing import List, Optional

import pandas as pd

from ..columns.spec import ColumnSpec
from ..errors import ConfigurationError
from ..sanitize import SanitizedTable
from ..themes.theme import Theme

logger = logging.getLogger(__name__)


def header_labels(table: SanitizedTable, theme: Theme) -> List[str]:
    if theme.header_bold:
        return [f"\\textbf{{{h}}}" for h in table.headers]
    return list(table.headers)


def _format_literal(label: str) -> str:
    # pandas applies str.format to header aliases; braces must be doubled
    return label.replace("{", "{{").replace("}", "}}")


def style_lines(theme: Theme) -> List[str]:
    lines = []
    if theme.font_size:
        lines.append(f"\\{theme.font_size}")
    if theme.striped and theme.shading_color:
        lines.append(f"\\rowcolors{{2}}{{{theme.shading_color}}}{{white}}")
    return lines


def apply_style(markup: str, theme: Theme) -> str:
    """Scope font size and row striping to the tabular with a TeX group."""
    extra = style_lines(theme)
    if not extra:
        return markup
    lines = markup.split("\n")
    out: List[str] = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith("\\begin{tabular}") or stripped.startswith("\\begin{longtable}"):
            out.append("\\begingroup")
            out.extend(extra)
            out.append(line)
        elif stripped.startswith("\\end{tabular}") or stripped.startswith("\\end{longtable}"):
            out.append(line)
            out.append("\\endgroup")
        else:
            out.append(line)
    return "\n".join(out)


def render_tabular(
    table: SanitizedTable,
    spec: ColumnSpec,
    theme: Theme,
    *,
    caption: Optional[str] = None,
    caption_short: Optional[str] = None,
    label: Optional[str] = None,
    longtable: bool = False,
) -> str:
    """Render the sanitized grid with booktabs rules.

    Cells are already escaped, so pandas is told not to escape again. The
    frame uses positional column labels because sanitized names may collide.
    """
    if len(spec) != table.n_columns:
        raise ConfigurationError(
            f"Column spec has {len(spec)} directive(s) for {table.n_columns} column(s)"
        )
    frame = pd.DataFrame(table.cells, columns=list(range(table.n_columns)), dtype=object)
    cap = None
    if caption:
        cap = (caption, caption_short) if caption_short else caption
    markup = frame.to_latex(
        index=False,
        header=[_format_literal(h) for h in header_labels(table, theme)],
        escape=False,
        column_format=spec.column_format,
        longtable=longtable,
        caption=cap,
        label=label,
    )
    logger.debug("Rendered %d x %d table (%d chars)", table.n_rows, table.n_columns, len(markup))
    return apply_style(markup.rstrip("\n"), theme)
