"""Render a sanitized table and apply the markup features in a fixed order."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

import pandas as pd

from ..columns.spec import ColumnSpec
from ..sanitize import SanitizedTable
from ..themes.theme import Theme
from .features import CollapseRows, Footnote, HeaderGroups, validate_header_groups
from .formatting import Formats, apply_formatting
from .postprocess import add_footnotes, add_header_groups, collapse_rows, protect_header
from .render import render_tabular

logger = logging.getLogger(__name__)

THREEPARTTABLE = "\\usepackage{threeparttable}"
MULTIROW = "\\usepackage{multirow}"
LONGTABLE = "\\usepackage{longtable}"


@dataclass
class AssembledTable:
    markup: str
    packages: Tuple[str, ...]


def _theme_packages(theme: Theme) -> List[str]:
    extra = theme.extras.get("packages") or ()
    if isinstance(extra, str):
        extra = [extra]
    return [str(p) for p in extra]


def collapse_positions(collapse: Optional[CollapseRows], table: SanitizedTable) -> List[int]:
    if collapse is None:
        return []
    names = list(table.columns.values())
    return collapse.positions(names, aliases=table.columns)


def assemble_table(
    table: SanitizedTable,
    spec: ColumnSpec,
    theme: Theme,
    *,
    caption: Optional[str] = None,
    caption_short: Optional[str] = None,
    label: Optional[str] = None,
    longtable: bool = False,
    footnote: Optional[Footnote] = None,
    header_above: HeaderGroups = None,
    collapse: Optional[CollapseRows] = None,
    formatting: Formats = None,
    values: Optional[pd.DataFrame] = None,
) -> AssembledTable:
    """Render ``table`` and post-process it.

    Steps run strictly in order: cell formatting, render, header
    protection, footnotes, header groups, row collapsing. Header spans,
    collapse columns and format targets are checked before the renderer is
    called. Format conditions are evaluated on ``values`` when given.
    """
    groups = validate_header_groups(header_above, table.n_columns)
    positions = collapse_positions(collapse, table)
    table = apply_formatting(table, formatting, values, spec.decimal_positions)

    markup = render_tabular(
        table, spec, theme,
        caption=caption, caption_short=caption_short, label=label, longtable=longtable,
    )
    markup = protect_header(markup, spec.decimal_positions)
    markup = add_footnotes(markup, footnote, table.n_columns)
    markup = add_header_groups(markup, groups, table.n_columns)
    markup = collapse_rows(markup, collapse, positions, table.n_rows)

    packages: List[str] = list(spec.packages)
    if footnote is not None and not footnote.is_empty() and footnote.threeparttable and not longtable:
        packages.append(THREEPARTTABLE)
    if positions:
        packages.append(MULTIROW)
    if longtable:
        packages.append(LONGTABLE)
    packages.extend(_theme_packages(theme))
    logger.debug("Assembled table needs packages: %s", packages)
    return AssembledTable(markup=markup, packages=tuple(dict.fromkeys(packages)))


def table_summary(table: SanitizedTable, spec: ColumnSpec) -> Mapping[str, object]:
    return {
        "rows": table.n_rows,
        "columns": table.n_columns,
        "column_format": spec.column_format,
        "decimal_columns": list(spec.decimal_positions),
    }
