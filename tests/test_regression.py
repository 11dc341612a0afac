import numpy as np
import pandas as pd
import pytest
from sklearn.linear_model import LinearRegression
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler

from tabfig import (
    ModelSummary,
    build_model_stats,
    format_with_stars,
    regression_table,
    summarize_linear_model,
    t2f_regression,
)
from tabfig.errors import InputValidationError


@pytest.fixture
def data():
    rng = np.random.default_rng(7)
    X = pd.DataFrame({"dose": np.linspace(0, 10, 40), "age": rng.normal(50, 8, 40)})
    y = 1.5 + 0.8 * X["dose"] + rng.normal(0, 0.5, 40)
    return X, y


def test_format_with_stars_thresholds():
    out = format_with_stars([1.23456, -0.5, 2.0, 3.0], [0.2, 0.04, 0.005, 0.0001], digits=2)
    assert out == ["1.23", "-0.50*", "2.00**", "3.00***"]


def test_format_with_stars_options():
    assert format_with_stars([1.0], [0.001], stars=False) == ["1.000"]
    assert format_with_stars([1.0], [0.001], stars=True) == ["1.000**"]
    assert format_with_stars([1.0], [0.04], stars=[0.1, 0.05]) == ["1.000**"]
    assert format_with_stars([np.nan, 1.0], [0.01, np.nan]) == ["", "1.000"]
    assert format_with_stars([1.0]) == ["1.000"]
    with pytest.raises(ValueError):
        format_with_stars([1.0], [0.1, 0.2])
    with pytest.raises(ValueError):
        format_with_stars([1.0], [0.1], stars=[1.5])


def test_model_summary_checks_lengths():
    with pytest.raises(ValueError):
        ModelSummary(terms=["a", "b"], estimates=[1.0])
    with pytest.raises(ValueError):
        ModelSummary(terms=["a"], estimates=[1.0], std_errors=[0.1, 0.2])
    s = ModelSummary(terms=["a"], estimates=[1.0], p_values=[0.5])
    assert s.lookup("a")[0] == 1.0
    assert np.isnan(s.lookup("a")[1])
    assert all(np.isnan(v) for v in s.lookup("zzz"))


def test_summarize_simple_regression_matches_closed_form(data):
    X, y = data
    x = X[["dose"]]
    model = LinearRegression().fit(x, y)
    s = summarize_linear_model(model, x, y)
    assert s.terms == ["(Intercept)", "dose"]
    assert s.n_obs == 40

    xv = x["dose"].to_numpy()
    resid = y.to_numpy() - model.predict(x)
    sigma2 = resid @ resid / (40 - 2)
    sxx = np.sum((xv - xv.mean()) ** 2)
    assert s.std_errors[1] == pytest.approx(np.sqrt(sigma2 / sxx))
    assert s.std_errors[0] == pytest.approx(np.sqrt(sigma2 * (1 / 40 + xv.mean() ** 2 / sxx)))
    assert s.r_squared == pytest.approx(model.score(x, y))
    assert s.adj_r_squared == pytest.approx(1 - (1 - s.r_squared) * 39 / 38)
    assert s.p_values[1] < 0.001


def test_summarize_pipeline_uses_transformed_design(data):
    X, y = data
    model = make_pipeline(StandardScaler(), LinearRegression()).fit(X, y)
    s = summarize_linear_model(model, X, y)
    assert s.terms == ["(Intercept)", "dose", "age"]
    assert s.estimates[0] == pytest.approx(y.mean())


def test_summarize_argument_errors(data):
    X, y = data
    model = LinearRegression().fit(X, y)
    with pytest.raises(ValueError):
        summarize_linear_model(model, X.iloc[:10], y)
    with pytest.raises(ValueError):
        summarize_linear_model(model, X[["dose"]], y)
    with pytest.raises(ValueError):
        summarize_linear_model(model, X.iloc[:3], y.iloc[:3])
    with pytest.raises(InputValidationError):
        summarize_linear_model(StandardScaler().fit(X), X, y)


def test_build_model_stats_blanks_missing_values():
    stats = build_model_stats({
        "A": ModelSummary(["x"], [1.0], n_obs=12, r_squared=0.5, adj_r_squared=0.45),
        "B": ModelSummary(["x"], [2.0]),
    }, digits=2)
    assert list(stats["term"]) == ["N", "R-squared", "Adj. R-squared"]
    assert list(stats["A"]) == ["12", "0.50", "0.45"]
    assert list(stats["B"]) == ["", "", ""]


def test_regression_table_layout():
    a = ModelSummary(["(Intercept)", "x"], [1.0, 2.0], [0.5, 0.1], [0.2, 0.001], n_obs=30, r_squared=0.8)
    b = ModelSummary(["(Intercept)", "z", "x"], [0.5, -1.0, 1.5], [0.4, 0.3, 0.2], [0.3, 0.02, 0.0001], n_obs=30)
    table = regression_table({"Base": a, "Full": b}, digits=2)
    assert list(table.columns) == ["term", "Base", "Full"]
    assert list(table["term"]) == ["(Intercept)", "", "x", "", "z", "", "N", "R-squared"]
    assert list(table.iloc[2]) == ["x", "2.00**", "1.50***"]
    assert list(table.iloc[3]) == ["", "(0.10)", "(0.20)"]
    assert list(table.iloc[4]) == ["z", "", "-1.00*"]
    assert list(table.iloc[7]) == ["R-squared", "0.80", ""]


def test_regression_table_from_list_of_fitted_models(data):
    X, y = data
    models = [LinearRegression().fit(X[["dose"]], y), LinearRegression().fit(X, y)]
    table = regression_table(models, se_in_parens=True)
    assert list(table.columns) == ["term", "Model 1", "Model 2"]
    assert list(table["term"]) == ["(Intercept)", "dose", "age"]
    assert table.iloc[2, 1] == ""


def test_regression_table_rejects_bad_input():
    with pytest.raises(InputValidationError):
        regression_table({})
    with pytest.raises(InputValidationError):
        regression_table("model")
    with pytest.raises(InputValidationError):
        regression_table({"m": object()})


def test_t2f_regression_end_to_end(tmp_path, data, fake_compiler, fake_cropper):
    X, y = data
    small = LinearRegression().fit(X[["dose"]], y)
    full = LinearRegression().fit(X, y)
    result = t2f_regression(
        {"Dose": summarize_linear_model(small, X[["dose"]], y), "Full": summarize_linear_model(full, X, y)},
        output_directory=tmp_path,
        compiler=fake_compiler,
        cropper=fake_cropper,
        caption="Dose response",
    )
    assert result.tex_path == tmp_path / "regression_table.tex"
    tex = result.tex_path.read_text()
    assert "\\textbf{term} & \\textbf{Dose} & \\textbf{Full}" in tex
    assert "dose & 0." in tex
    assert "***" in tex
    assert "Adj. R-squared" in tex
    assert "\\caption{Dose response}" in tex
