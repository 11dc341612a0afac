"""Line-level rewrites of rendered tabular markup.

Rows are split on unescaped ``&``; every rewrite keeps the original
separators and whitespace, so untouched cells stay byte-for-byte identical.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from ..errors import ConfigurationError
from ..sanitize import escape_latex
from .features import VALIGN, CollapseRows, Footnote, HeaderGroup, HeaderGroups, as_header_groups

_CELL_SEP = re.compile(r"(?<!\\)&")
_ROW_END = re.compile(r"^(.*?)(\s*\\\\(?:\[[^\]]*\])?\s*)$", re.S)
_PADDING = re.compile(r"^(\s*)(.*?)(\s*)$", re.S)

_TABULAR_ENVS = ("tabular", "longtable")


def _split_row(line: str) -> Tuple[List[str], str]:
    """Split a row into raw cell strings and the trailing ``\\\\`` part."""
    m = _ROW_END.match(line)
    if m is None:
        return _CELL_SEP.split(line), ""
    return _CELL_SEP.split(m.group(1)), m.group(2)


def _join_row(cells: Sequence[str], end: str) -> str:
    return "&".join(cells) + end


def _pad(cell: str) -> Tuple[str, str, str]:
    m = _PADDING.match(cell)
    return m.group(1), m.group(2), m.group(3)


def _is_command(line: str, name: str) -> bool:
    return line.strip().startswith("\\" + name)


def _env_index(lines: Sequence[str], kind: str, env: str, start: int = 0) -> Optional[int]:
    tag = f"\\{kind}{{{env}}}"
    for i in range(start, len(lines)):
        if lines[i].strip().startswith(tag):
            return i
    return None


def _tabular_env(lines: Sequence[str]) -> Optional[str]:
    for env in _TABULAR_ENVS:
        if _env_index(lines, "begin", env) is not None:
            return env
    return None


def header_line_indices(lines: Sequence[str]) -> List[int]:
    """Indices of header rows: the row right before the first ``\\midrule`` after each ``\\toprule``."""
    out = []
    for i, line in enumerate(lines):
        if not _is_command(line, "toprule"):
            continue
        for j in range(i + 1, len(lines)):
            if _is_command(lines[j], "midrule"):
                if j - 1 > i:
                    out.append(j - 1)
                break
    return out


def protect_header(markup: str, positions: Sequence[int]) -> str:
    """Wrap the header cells at 1-indexed ``positions`` in an extra brace group.

    siunitx ``S`` columns try to parse header text as a number; the braces
    make it treat ``\\textbf{...}`` as plain text.
    """
    if not positions:
        return markup
    wanted = set(positions)
    lines = markup.split("\n")
    for idx in header_line_indices(lines):
        cells, end = _split_row(lines[idx])
        for pos in wanted:
            if pos > len(cells):
                continue
            lead, core, trail = _pad(cells[pos - 1])
            if not core or (core.startswith("{") and core.endswith("}")):
                continue
            cells[pos - 1] = f"{lead}{{{core}}}{trail}"
        lines[idx] = _join_row(cells, end)
    return "\n".join(lines)


def _note_lines(footnote: Footnote) -> List[Tuple[Optional[str], str]]:
    """Flatten footnote sections into ``(marker, text)`` pairs; titles get marker ``None``."""
    out: List[Tuple[Optional[str], str]] = []
    for title, notes in footnote.sections():
        general = notes[0][0] is None
        if title and not general:
            out.append((None, f"\\textit{{{escape_latex(title)}}}"))
        for k, (marker, text) in enumerate(notes):
            text = escape_latex(text)
            if general and title and k == 0:
                text = f"\\textit{{{escape_latex(title)}}} {text}"
            out.append((marker, text))
    return out


def add_footnotes(markup: str, footnote: Optional[Footnote], n_columns: int) -> str:
    """Append footnotes below the table.

    With ``threeparttable`` a plain ``tabular`` is wrapped in a
    ``threeparttable`` environment holding a ``tablenotes`` block. For
    ``longtable`` (which cannot sit inside that wrapper) or when the wrapper
    is disabled, notes become full-width rows at the bottom of the table.
    """
    if footnote is None or footnote.is_empty():
        return markup
    notes = _note_lines(footnote)
    lines = markup.split("\n")
    env = _tabular_env(lines)
    if env is None:
        raise ConfigurationError("Cannot place footnotes: no tabular environment in markup")

    if env == "tabular" and footnote.threeparttable:
        begin = _env_index(lines, "begin", "tabular")
        end = _env_index(lines, "end", "tabular", begin)
        block = ["\\begin{tablenotes}", "\\small"]
        for marker, text in notes:
            label = f"\\textsuperscript{{{marker}}}" if marker is not None else ""
            block.append(f"\\item[{label}] {text}")
        block.extend(["\\end{tablenotes}", "\\end{threeparttable}"])
        lines[end + 1:end + 1] = block
        lines.insert(begin, "\\begin{threeparttable}")
        return "\n".join(lines)

    rows = []
    for marker, text in notes:
        label = f"\\textsuperscript{{{marker}}}" if marker is not None else ""
        rows.append(f"\\multicolumn{{{n_columns}}}{{l}}{{{label}{text}}} \\\\")
    if env == "longtable":
        at = _env_index(lines, "end", "longtable")
    else:
        at = None
        for i, line in enumerate(lines):
            if _is_command(line, "bottomrule"):
                at = i + 1
        if at is None:
            at = _env_index(lines, "end", "tabular")
    lines[at:at] = rows
    return "\n".join(lines)


def header_group_rows(group: HeaderGroup, line_sep: int = 3) -> List[str]:
    """Markup for one spanning header row plus its ``\\cmidrule`` line."""
    cells = []
    rules = []
    start = 1
    for label, span in group.groups:
        text = "" if not label.strip() else escape_latex(label)
        if text and group.italic:
            text = f"\\textit{{{text}}}"
        if text and group.bold:
            text = f"\\textbf{{{text}}}"
        cells.append(f"\\multicolumn{{{span}}}{{{group.align}}}{{{text}}}")
        if text and group.line:
            rules.append(f"\\cmidrule(l{{{line_sep}pt}}r{{{line_sep}pt}}){{{start}-{start + span - 1}}}")
        start += span
    rows = [" & ".join(cells) + " \\\\"]
    if rules:
        rows.append(" ".join(rules))
    return rows


def add_header_groups(markup: str, header_above: HeaderGroups, n_columns: int) -> str:
    """Insert spanning header rows above every header of the table.

    The first group in ``header_above`` sits directly above the column
    header, later groups stack on top of it.
    """
    groups = as_header_groups(header_above)
    if not groups:
        return markup
    for g in groups:
        g.validate(n_columns)
    block: List[str] = []
    for g in reversed(groups):
        block.extend(header_group_rows(g))
    lines = markup.split("\n")
    out: List[str] = []
    for line in lines:
        out.append(line)
        if _is_command(line, "toprule"):
            out.extend(block)
    return "\n".join(out)


def _body_row_indices(lines: Sequence[str], n_rows: int) -> List[int]:
    start = None
    for i, line in enumerate(lines):
        if _is_command(line, "endlastfoot"):
            start = i + 1
    if start is None:
        headers = header_line_indices(lines)
        if not headers:
            raise ConfigurationError("Cannot locate table body: no header row in markup")
        start = headers[-1] + 2
    out = []
    for i in range(start, len(lines)):
        if len(out) == n_rows or _is_command(lines[i], "bottomrule") or _is_command(lines[i], "end{"):
            break
        if _ROW_END.match(lines[i]):
            out.append(i)
    return out


def collapse_rows(markup: str, collapse: Optional[CollapseRows], positions: Sequence[int], n_rows: int) -> str:
    """Merge vertical runs of identical cells in the columns at ``positions``.

    Runs in a later column never cross a run boundary of an earlier one.
    ``hline="major"`` rules off runs of the first collapsed column,
    ``"full"`` adds a partial rule at every run boundary.
    """
    if collapse is None or not positions:
        return markup
    lines = markup.split("\n")
    idx = _body_row_indices(lines, n_rows)
    if len(idx) < 2:
        return markup
    rows = [_split_row(lines[i]) for i in idx]
    n_columns = max(len(cells) for cells, _ in rows)
    vpos = VALIGN[collapse.valign]

    boundaries = {0}
    rules = {}
    for depth, pos in enumerate(positions):
        values = [_pad(cells[pos - 1])[1] if pos <= len(cells) else "" for cells, _ in rows]
        run_start = 0
        for r in range(1, len(rows) + 1):
            if r < len(rows) and r not in boundaries and values[r] == values[r - 1]:
                continue
            span = r - run_start
            if span > 1:
                cells = rows[run_start][0]
                lead, core, trail = _pad(cells[pos - 1])
                cells[pos - 1] = f"{lead}\\multirow[{vpos}]{{{span}}}{{*}}{{{core}}}{trail}"
                for k in range(run_start + 1, r):
                    lead, _, trail = _pad(rows[k][0][pos - 1])
                    rows[k][0][pos - 1] = lead + trail
            if r < len(rows):
                if r not in rules:
                    if collapse.hline == "major" and depth == 0:
                        rules[r] = "\\midrule"
                    elif collapse.hline == "full":
                        rules[r] = f"\\cmidrule{{{pos}-{n_columns}}}"
                boundaries.add(r)
            run_start = r

    for k, i in enumerate(idx):
        cells, end = rows[k]
        lines[i] = _join_row(cells, end)
    for r in sorted(rules, reverse=True):
        lines.insert(idx[r], rules[r])
    return "\n".join(lines)
