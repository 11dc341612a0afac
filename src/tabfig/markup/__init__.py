from .document import Package, babel, build_document, fontspec, geometry
from .features import CollapseRows, Footnote, HeaderGroup
from .formatting import (
    CellFormat,
    apply_formatting,
    t2f_bold_col,
    t2f_color_row,
    t2f_format,
    t2f_highlight,
    t2f_italic_col,
)
from .postprocess import add_footnotes, add_header_groups, collapse_rows, protect_header
from .render import render_tabular
from .table import AssembledTable, assemble_table

__all__ = [
    "AssembledTable",
    "CellFormat",
    "CollapseRows",
    "Footnote",
    "HeaderGroup",
    "Package",
    "add_footnotes",
    "add_header_groups",
    "apply_formatting",
    "assemble_table",
    "babel",
    "build_document",
    "collapse_rows",
    "fontspec",
    "geometry",
    "protect_header",
    "render_tabular",
    "t2f_bold_col",
    "t2f_color_row",
    "t2f_format",
    "t2f_highlight",
    "t2f_italic_col",
]
