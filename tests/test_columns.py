import pytest

from tabfig.columns import DecimalColumn, build_column_spec, decimal, detect_decimal_columns
from tabfig.errors import ConfigurationError, InputValidationError


def test_detect_decimal_columns_mixed_spec():
    assert detect_decimal_columns(["l", decimal(3, 2), "r", decimal(2, 3)]) == [2, 4]


def test_detect_decimal_columns_plain_spec():
    assert detect_decimal_columns(["l", "c", "r"]) == []


def test_detect_decimal_columns_raw_strings():
    assert detect_decimal_columns(["S", "l", "S[table-format=1.3]", "Sx"]) == [1, 3]
    assert detect_decimal_columns(None) == []


def test_decimal_directive_and_packages():
    col = decimal(3, 2)
    assert col.directive == "S[table-format=3.2,detect-weight=true,mode=text]"
    assert "\\usepackage{siunitx}" in col.packages
    rounded = DecimalColumn(table_format="2.1", round_mode="places", round_precision=1, detect_weight=False)
    assert rounded.directive == "S[table-format=2.1,round-mode=places,round-precision=1]"


def test_decimal_rejects_bad_format():
    with pytest.raises(InputValidationError):
        DecimalColumn(table_format="three")
    with pytest.raises(InputValidationError):
        DecimalColumn(round_mode="sometimes")


def test_default_alignment_follows_column_types():
    spec = build_column_spec(None, 3, numeric=[False, True, True])
    assert spec.column_format == "lrr"
    assert spec.decimal_positions == ()
    assert spec.packages == ()


def test_uniform_and_concatenated_tokens():
    assert build_column_spec("c", 3).column_format == "ccc"
    assert build_column_spec("lcr", 3).column_format == "lcr"
    with pytest.raises(ConfigurationError):
        build_column_spec("lr", 3)


def test_explicit_list_length_must_match():
    with pytest.raises(ConfigurationError):
        build_column_spec(["l", "r"], 3)


def test_list_with_decimal_columns_collects_packages_once():
    spec = build_column_spec(["l", decimal(3, 2), decimal(1, 3)], 3)
    assert spec.directives[0] == "l"
    assert spec.directives[1].startswith("S[table-format=3.2")
    assert spec.decimal_positions == (2, 3)
    assert spec.packages == ("\\usepackage{siunitx}", "\\sisetup{detect-all}")
    assert len(spec) == 3


def test_uniform_decimal_column():
    spec = build_column_spec(decimal(2, 2), 2)
    assert spec.decimal_positions == (1, 2)


def test_zero_columns_rejected():
    with pytest.raises(InputValidationError):
        build_column_spec(None, 0)
