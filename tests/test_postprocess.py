import pytest

from tabfig.errors import ConfigurationError, InputValidationError
from tabfig.markup.features import CollapseRows, Footnote, HeaderGroup, alphabet_marker, symbol_marker
from tabfig.markup.postprocess import (
    add_footnotes,
    add_header_groups,
    collapse_rows,
    header_group_rows,
    protect_header,
)

TABULAR = "\n".join([
    "\\begin{tabular}{lSSr}",
    "\\toprule",
    "\\textbf{name} & \\textbf{mean} & \\textbf{sd} & \\textbf{n} \\\\",
    "\\midrule",
    "a & 1.50 & 0.20 & 10 \\\\",
    "b & 2.25 & 0.31 & 12 \\\\",
    "\\bottomrule",
    "\\end{tabular}",
])

LONGTABLE = "\n".join([
    "\\begin{longtable}{ll}",
    "\\toprule",
    "g & v \\\\",
    "\\midrule",
    "\\endfirsthead",
    "\\toprule",
    "g & v \\\\",
    "\\midrule",
    "\\endhead",
    "\\midrule",
    "\\multicolumn{2}{r}{Continued on next page} \\\\",
    "\\midrule",
    "\\endfoot",
    "\\bottomrule",
    "\\endlastfoot",
    "x & 1 \\\\",
    "x & 2 \\\\",
    "\\end{longtable}",
])

GROUPED = "\n".join([
    "\\begin{tabular}{lll}",
    "\\toprule",
    "grp & sub & val \\\\",
    "\\midrule",
    "A & x & 1 \\\\",
    "A & x & 2 \\\\",
    "A & y & 3 \\\\",
    "B & y & 4 \\\\",
    "\\bottomrule",
    "\\end{tabular}",
])


def test_protect_header_wraps_only_flagged_cells():
    out = protect_header(TABULAR, [2, 3])
    lines_in = TABULAR.split("\n")
    lines_out = out.split("\n")
    assert lines_out[2] == "\\textbf{name} & {\\textbf{mean}} & {\\textbf{sd}} & \\textbf{n} \\\\"
    # every other line is byte-for-byte identical
    assert [l for i, l in enumerate(lines_out) if i != 2] == [l for i, l in enumerate(lines_in) if i != 2]


def test_protect_header_noop_without_positions():
    assert protect_header(TABULAR, []) == TABULAR


def test_protect_header_handles_every_longtable_header():
    out = protect_header(LONGTABLE, [2])
    assert out.count("g & {v} \\\\") == 2


def test_protect_header_keeps_escaped_ampersand_inside_cell():
    markup = "\\toprule\nR\\&D & cost \\\\\n\\midrule"
    assert protect_header(markup, [2]).split("\n")[1] == "R\\&D & {cost} \\\\"


def test_markers():
    assert [alphabet_marker(i) for i in (0, 25, 26, 27)] == ["a", "z", "aa", "ab"]
    assert [symbol_marker(i) for i in (0, 1, 4, 5)] == ["*", "\\dag", "\\P", "**"]


def test_footnotes_threeparttable_order():
    fn = Footnote(general="Data from 2024.", number=["First", "Second"], alphabet=["Alpha"], symbol=["Star"])
    out = add_footnotes(TABULAR, fn, 4)
    lines = out.split("\n")
    assert lines[0] == "\\begin{threeparttable}"
    assert lines[-1] == "\\end{threeparttable}"
    notes = [l for l in lines if l.startswith("\\item")]
    assert notes == [
        "\\item[] \\textit{Note:} Data from 2024.",
        "\\item[\\textsuperscript{1}] First",
        "\\item[\\textsuperscript{2}] Second",
        "\\item[\\textsuperscript{a}] Alpha",
        "\\item[\\textsuperscript{*}] Star",
    ]
    assert out.index("\\end{tabular}") < out.index("\\begin{tablenotes}")


def test_footnotes_are_escaped():
    out = add_footnotes(TABULAR, Footnote(general="5% trimmed"), 4)
    assert "5\\% trimmed" in out


def test_footnotes_on_longtable_become_rows():
    out = add_footnotes(LONGTABLE, Footnote(number=["Only note"]), 2)
    assert "threeparttable" not in out
    lines = out.split("\n")
    assert lines[-2] == "\\multicolumn{2}{l}{\\textsuperscript{1}Only note} \\\\"
    assert lines[-1] == "\\end{longtable}"


def test_footnotes_without_wrapper_go_after_bottomrule():
    out = add_footnotes(TABULAR, Footnote(general="n/a", general_title=None, threeparttable=False), 4)
    lines = out.split("\n")
    i = lines.index("\\bottomrule")
    assert lines[i + 1] == "\\multicolumn{4}{l}{n/a} \\\\"


def test_empty_footnote_is_noop():
    assert add_footnotes(TABULAR, Footnote(), 4) == TABULAR
    assert add_footnotes(TABULAR, None, 4) == TABULAR


def test_header_group_rows_markup():
    rows = header_group_rows(HeaderGroup([(" ", 1), ("Stats", 2), ("", 1)]))
    assert rows[0] == "\\multicolumn{1}{c}{} & \\multicolumn{2}{c}{\\textbf{Stats}} & \\multicolumn{1}{c}{} \\\\"
    assert rows[1] == "\\cmidrule(l{3pt}r{3pt}){2-3}"


def test_header_groups_inserted_above_header():
    inner = HeaderGroup.from_dict({" ": 1, "Summary": 2, "Count": 1}, bold=False)
    outer = HeaderGroup([("All", 4)], italic=True, line=False)
    out = add_header_groups(TABULAR, [inner, outer], 4)
    lines = out.split("\n")
    assert lines[1] == "\\toprule"
    assert lines[2] == "\\multicolumn{4}{c}{\\textbf{\\textit{All}}} \\\\"
    assert lines[3].startswith("\\multicolumn{1}{c}{} & \\multicolumn{2}{c}{Summary}")
    assert lines[4] == "\\cmidrule(l{3pt}r{3pt}){2-3} \\cmidrule(l{3pt}r{3pt}){4-4}"
    assert lines[5].startswith("\\textbf{name}")


def test_header_group_span_mismatch_raises():
    with pytest.raises(ConfigurationError):
        add_header_groups(TABULAR, HeaderGroup([("A", 2), ("B", 1)]), 4)


def test_header_group_rejects_bad_spans():
    with pytest.raises(InputValidationError):
        HeaderGroup([("A", 0)])
    with pytest.raises(InputValidationError):
        HeaderGroup([])


def test_collapse_rows_first_column():
    collapse = CollapseRows(columns=[1])
    out = collapse_rows(GROUPED, collapse, [1], 4)
    lines = out.split("\n")
    assert lines[4] == "\\multirow[c]{3}{*}{A} & x & 1 \\\\"
    assert lines[5] == " & x & 2 \\\\"
    assert lines[6] == " & y & 3 \\\\"
    assert lines[7] == "B & y & 4 \\\\"


def test_collapse_rows_respects_earlier_column_boundaries():
    collapse = CollapseRows(columns=[1, 2], valign="top")
    out = collapse_rows(GROUPED, collapse, [1, 2], 4)
    lines = out.split("\n")
    assert lines[4] == "\\multirow[t]{3}{*}{A} & \\multirow[t]{2}{*}{x} & 1 \\\\"
    # y in rows 3 and 4 spans two groups, so it is not merged
    assert lines[6] == " & y & 3 \\\\"
    assert lines[7] == "B & y & 4 \\\\"


def test_collapse_rows_major_rule():
    out = collapse_rows(GROUPED, CollapseRows(columns=[1], hline="major"), [1], 4)
    lines = out.split("\n")
    assert lines[7] == "\\midrule"
    assert lines[8] == "B & y & 4 \\\\"


def test_collapse_positions_by_name():
    collapse = CollapseRows(columns=["group id", "sub"])
    names = ["group_id", "sub", "val"]
    assert collapse.positions(names, aliases={"group id": "group_id"}) == [1, 2]
    with pytest.raises(ConfigurationError):
        CollapseRows(columns=["missing"]).positions(names)
    with pytest.raises(ConfigurationError):
        CollapseRows(columns=[4]).positions(names)


def test_collapse_rows_options_validated():
    with pytest.raises(InputValidationError):
        CollapseRows(valign="center")
    with pytest.raises(InputValidationError):
        CollapseRows(hline="double")
