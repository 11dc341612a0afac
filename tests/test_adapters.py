import numpy as np
import pandas as pd
import pytest
from sklearn.linear_model import LinearRegression, LogisticRegression
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler

from tabfig.adapters import adapt, default_name, register_adapter, to_frame, unregister_adapter
from tabfig.coefs import build_coef_table, format_pvalue
from tabfig.errors import InputValidationError


def test_dataframe_passthrough():
    df = pd.DataFrame({"a": [1, 2]})
    tag, out = adapt(df)
    assert tag == "dataframe"
    assert out is df


def test_series_mapping_records_ndarray():
    assert list(to_frame(pd.Series([1, 2], name="s")).columns) == ["s"]
    assert to_frame({"a": [1, 2], "b": [3, 4]}).shape == (2, 2)
    assert to_frame([{"a": 1}, {"a": 2, "b": 3}]).shape == (2, 2)
    arr = to_frame(np.zeros((4, 3)))
    assert list(arr.columns) == ["V1", "V2", "V3"]
    assert list(to_frame(np.arange(3)).columns) == ["V1"]


def test_rejects_non_tabular():
    with pytest.raises(InputValidationError):
        to_frame(object())
    with pytest.raises(InputValidationError):
        to_frame(np.zeros((2, 2, 2)))
    with pytest.raises(InputValidationError):
        to_frame({"a": 1, "b": 2})
    with pytest.raises(InputValidationError):
        to_frame(pd.DataFrame({"a": []}))


def test_register_custom_adapter():
    class Summary:
        def __init__(self, rows):
            self.rows = rows

    register_adapter("summary", lambda x: isinstance(x, Summary), lambda x: pd.DataFrame(x.rows))
    try:
        tag, df = adapt(Summary([{"k": "n", "v": 3}]))
        assert tag == "summary"
        assert df.iloc[0]["v"] == 3
        assert default_name(Summary([]), tag) == "summary"
    finally:
        assert unregister_adapter("summary") is True


def test_register_adapter_as_decorator():
    @register_adapter("pairs", lambda x: isinstance(x, tuple) and len(x) == 2 and isinstance(x[0], list))
    def _pairs(x):
        return pd.DataFrame({"key": x[0], "value": x[1]})

    try:
        assert to_frame((["a", "b"], [1, 2])).shape == (2, 2)
    finally:
        unregister_adapter("pairs")


def test_default_names():
    df = pd.DataFrame({"a": [1]})
    assert default_name(df, "dataframe") == "table"
    df.attrs["name"] = "demographics"
    assert default_name(df, "dataframe") == "demographics"
    assert default_name(pd.Series([1], name="age"), "series") == "age"


def test_sklearn_linear_regression_table():
    X = pd.DataFrame({"dose": [0.0, 1.0, 2.0, 3.0], "age": [30.0, 40.0, 35.0, 50.0]})
    y = 1.0 + 2.0 * X["dose"] + 0.5 * X["age"]
    model = LinearRegression().fit(X, y)
    tag, df = adapt(model)
    assert tag == "sklearn_linear"
    assert list(df["term"]) == ["(Intercept)", "dose", "age"]
    assert df["estimate"].tolist() == pytest.approx([1.0, 2.0, 0.5], abs=1e-3)


def test_sklearn_pipeline_and_multiclass():
    rng = np.random.default_rng(0)
    X = rng.normal(size=(60, 2))
    y = np.repeat([0, 1, 2], 20)
    X[y == 1] += 3
    X[y == 2] -= 3
    model = make_pipeline(StandardScaler(), LogisticRegression(max_iter=500)).fit(X, y)
    df = to_frame(model)
    assert list(df.columns) == ["term", "estimate_0", "estimate_1", "estimate_2"]
    assert list(df["term"]) == ["(Intercept)", "x1", "x2"]


def test_unfitted_model_is_not_tabular():
    with pytest.raises(InputValidationError):
        to_frame(LinearRegression())


def test_format_pvalue():
    assert format_pvalue(0.04567) == "0.046"
    assert format_pvalue(0.0002) == "<0.001"
    assert format_pvalue(0.0002, digits=4) == "0.0002"
    assert format_pvalue(float("nan")) == ""
    with pytest.raises(ValueError):
        format_pvalue(1.5)


def test_build_coef_table():
    df = build_coef_table(["a", "b"], [1.23456, -0.5], std_errors=[0.1, 0.2], p_values=[0.5, 0.00001])
    assert list(df.columns) == ["term", "estimate", "std_error", "p_value"]
    assert df["estimate"].tolist() == [1.235, -0.5]
    assert df["p_value"].tolist() == ["0.500", "<0.001"]
    with pytest.raises(ValueError):
        build_coef_table(["a"], [1.0, 2.0])
