import re

import numpy as np
import pandas as pd

from tabfig.sanitize import (
    escape_latex,
    sanitize_column_names,
    sanitize_filename,
    sanitize_frame,
    sanitize_table_cells,
)


def test_column_names_use_safe_identifier_set_and_keep_order():
    names = ["Mean (SD)", "p-value", "n", "", "2nd run", "über", "a.b"]
    out = sanitize_column_names(names)
    assert len(out) == len(names)
    for safe in out:
        assert re.fullmatch(r"[A-Za-z0-9_]+", safe)
        assert safe[0].isalpha()
    assert out[0] == "Mean__SD_"
    assert out[1] == "p_value"
    assert out[2] == "n"
    assert out[3] == "X"
    assert out[4] == "X2nd_run"
    assert out[6] == "a_b"


def test_column_names_are_deterministic():
    names = ["x y", "x-y", "z"]
    assert sanitize_column_names(names) == sanitize_column_names(list(names))


def test_reserved_characters_get_escape_prefix():
    for ch in "#%&$_{}":
        assert sanitize_table_cells([f"a{ch}b"]) == [f"a\\{ch}b"]


def test_tilde_caret_backslash_use_text_commands():
    assert escape_latex("~") == "\\textasciitilde{}"
    assert escape_latex("^") == "\\textasciicircum{}"
    assert escape_latex("\\") == "\\textbackslash{}"


def test_escaping_is_single_pass():
    # the braces produced for the backslash must not be escaped again
    assert escape_latex("a\\b") == "a\\textbackslash{}b"
    assert escape_latex("50% & $5_{x}") == "50\\% \\& \\$5\\_\\{x\\}"


def test_plain_text_is_untouched():
    assert sanitize_table_cells(["hello world", "1.25"]) == ["hello world", "1.25"]


def test_line_breaks_collapse_to_a_space():
    assert sanitize_table_cells(["a\nb", "c\r\n\r\n  d", "e_\nf"]) == ["a b", "c d", "e\\_ f"]


def test_missing_values_become_empty_and_numbers_are_stringified():
    assert sanitize_table_cells([None, np.nan, 3, 2.5]) == ["", "", "3", "2.5"]


def test_filename_sanitization():
    assert sanitize_filename("my table (v2).final") == "my_table__v2__final"
    assert sanitize_filename("ok-name_1") == "ok-name_1"
    assert sanitize_filename("") == "table"


def test_sanitize_frame_maps_names_and_escapes_cells():
    df = pd.DataFrame({"p_value": ["<0.05", "5%"], "group #": ["A&B", None]})
    table = sanitize_frame(df)
    assert table.columns == {"p_value": "p_value", "group #": "group__"}
    assert table.headers == ["p\\_value", "group\\_\\_"]
    assert table.cells == [["<0.05", "A\\&B"], ["5\\%", ""]]
    assert table.n_rows == 2
    assert table.n_columns == 2


def test_sanitize_frame_float_format():
    df = pd.DataFrame({"x": [1.23456, np.nan]})
    table = sanitize_frame(df, float_format=".2f")
    assert table.cells == [["1.23"], [""]]
