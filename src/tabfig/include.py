"""LaTeX snippets that include a cropped table artifact in a host document.

Every helper accepts the base path, the full PDF or the cropped PDF and
always points at ``<name>_cropped.pdf``. Snippets are returned as strings.
"""

from __future__ import annotations

import os
import re
from typing import List, Optional

from .errors import InputValidationError

REF_TYPES = ("ref", "autoref", "pageref", "nameref")

_PDF_EXT = re.compile(r"\.pdf$", re.I)


def resolve_pdf_path(path: os.PathLike | str) -> str:
    """``results``, ``results.pdf`` and ``results_cropped.pdf`` all map to ``results_cropped.pdf``."""
    p = _PDF_EXT.sub("", os.fspath(path))
    if not p.endswith("_cropped"):
        p += "_cropped"
    return (p + ".pdf").replace(os.sep, "/")


def _caption_lines(caption: Optional[str], short_caption: Optional[str], label: Optional[str],
                   indent: str = "  ") -> List[str]:
    lines = []
    if caption is not None:
        if short_caption is not None:
            lines.append(f"{indent}\\caption[{short_caption}]{{{caption}}}")
        else:
            lines.append(f"{indent}\\caption{{{caption}}}")
    if label is not None:
        lines.append(f"{indent}\\label{{{label}}}")
    return lines


def t2f_include(
    path: os.PathLike | str,
    caption: Optional[str] = None,
    label: Optional[str] = None,
    position: str = "htbp",
    width: str = "\\textwidth",
    center: bool = True,
    short_caption: Optional[str] = None,
) -> str:
    """Floating ``figure`` environment around the cropped table."""
    lines = [f"\\begin{{figure}}[{position}]"]
    if center:
        lines.append("  \\centering")
    lines.append(f"  \\includegraphics[width={width}]{{{resolve_pdf_path(path)}}}")
    lines.extend(_caption_lines(caption, short_caption, label))
    lines.append("\\end{figure}")
    return "\n".join(lines)


def t2f_include_inline(
    path: os.PathLike | str,
    width: str = "\\textwidth",
    center: bool = True,
    vspace: Optional[str] = None,
) -> str:
    lines = []
    if vspace is not None:
        lines.append(f"\\vspace{{{vspace}}}")
    if center:
        lines.append("\\begin{center}")
    lines.append(f"\\includegraphics[width={width}]{{{resolve_pdf_path(path)}}}")
    if center:
        lines.append("\\end{center}")
    if vspace is not None:
        lines.append(f"\\vspace{{{vspace}}}")
    return "\n".join(lines)


def t2f_include_wrap(
    path: os.PathLike | str,
    placement: str = "r",
    wrap_width: str = "0.5\\textwidth",
    width: Optional[str] = None,
    caption: Optional[str] = None,
    label: Optional[str] = None,
) -> str:
    """``wrapfigure`` snippet; the host document needs the ``wrapfig`` package."""
    if placement not in ("r", "l", "i", "o", "R", "L", "I", "O"):
        raise InputValidationError(f"Invalid wrapfigure placement {placement!r}")
    lines = [
        f"\\begin{{wrapfigure}}{{{placement}}}{{{wrap_width}}}",
        "  \\centering",
        f"  \\includegraphics[width={width or wrap_width}]{{{resolve_pdf_path(path)}}}",
    ]
    lines.extend(_caption_lines(caption, None, label))
    lines.append("\\end{wrapfigure}")
    return "\n".join(lines)


def t2f_include_sidebyside(
    path1: os.PathLike | str,
    path2: os.PathLike | str,
    caption1: Optional[str] = None,
    caption2: Optional[str] = None,
    label1: Optional[str] = None,
    label2: Optional[str] = None,
    width1: str = "0.48\\textwidth",
    width2: str = "0.48\\textwidth",
    position: str = "htbp",
    main_caption: Optional[str] = None,
    main_label: Optional[str] = None,
) -> str:
    lines = [f"\\begin{{figure}}[{position}]", "  \\centering"]
    panels = ((path1, width1, caption1, label1), (path2, width2, caption2, label2))
    for k, (path, width, caption, label) in enumerate(panels):
        lines.append(f"  \\begin{{minipage}}{{{width}}}")
        lines.append("    \\centering")
        lines.append(f"    \\includegraphics[width=\\textwidth]{{{resolve_pdf_path(path)}}}")
        lines.extend(_caption_lines(caption, None, label, indent="    "))
        lines.append("  \\end{minipage}")
        if k == 0:
            lines.append("  \\hfill")
    lines.extend(_caption_lines(main_caption, None, main_label))
    lines.append("\\end{figure}")
    return "\n".join(lines)


def t2f_ref(label: str, type: str = "ref") -> str:
    if type not in REF_TYPES:
        raise InputValidationError(f"type must be one of {', '.join(REF_TYPES)}")
    return f"\\{type}{{{label}}}"
