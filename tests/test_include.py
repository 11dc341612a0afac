import pytest

from tabfig.errors import InputValidationError
from tabfig.include import (
    resolve_pdf_path,
    t2f_include,
    t2f_include_inline,
    t2f_include_sidebyside,
    t2f_include_wrap,
    t2f_ref,
)


@pytest.mark.parametrize("path", ["figs/results", "figs/results.pdf", "figs/results_cropped.pdf"])
def test_resolve_pdf_path(path):
    assert resolve_pdf_path(path) == "figs/results_cropped.pdf"


def test_include_figure():
    out = t2f_include("figs/t1", caption="Main results", label="fig:t1", short_caption="Results")
    assert out.split("\n") == [
        "\\begin{figure}[htbp]",
        "  \\centering",
        "  \\includegraphics[width=\\textwidth]{figs/t1_cropped.pdf}",
        "  \\caption[Results]{Main results}",
        "  \\label{fig:t1}",
        "\\end{figure}",
    ]


def test_include_inline():
    out = t2f_include_inline("t1", width="0.8\\linewidth", vspace="1em")
    assert out.split("\n") == [
        "\\vspace{1em}",
        "\\begin{center}",
        "\\includegraphics[width=0.8\\linewidth]{t1_cropped.pdf}",
        "\\end{center}",
        "\\vspace{1em}",
    ]
    assert t2f_include_inline("t1", center=False) == "\\includegraphics[width=\\textwidth]{t1_cropped.pdf}"


def test_include_wrap():
    out = t2f_include_wrap("t1", placement="l", caption="Side")
    assert out.startswith("\\begin{wrapfigure}{l}{0.5\\textwidth}")
    assert "\\includegraphics[width=0.5\\textwidth]{t1_cropped.pdf}" in out
    assert "\\caption{Side}" in out
    with pytest.raises(InputValidationError):
        t2f_include_wrap("t1", placement="x")


def test_include_sidebyside():
    out = t2f_include_sidebyside("a", "b", caption1="A", label2="fig:b", main_caption="Both")
    lines = out.split("\n")
    assert lines.count("  \\hfill") == 1
    assert "    \\includegraphics[width=\\textwidth]{a_cropped.pdf}" in lines
    assert "    \\includegraphics[width=\\textwidth]{b_cropped.pdf}" in lines
    assert "    \\caption{A}" in lines
    assert "    \\label{fig:b}" in lines
    assert lines[-2] == "  \\caption{Both}"


def test_ref():
    assert t2f_ref("fig:x") == "\\ref{fig:x}"
    assert t2f_ref("fig:x", "autoref") == "\\autoref{fig:x}"
    with pytest.raises(InputValidationError):
        t2f_ref("fig:x", "cite")
