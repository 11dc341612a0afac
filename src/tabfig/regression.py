"""Side-by-side comparison tables for several fitted linear models."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.pipeline import Pipeline

from .adapters.builtin import feature_names, final_estimator
from .coefs import INTERCEPT, STARS, ModelSummary, build_model_stats, format_with_stars
from .compile import CompileResult
from .errors import InputValidationError
from .pipeline import t2f

logger = logging.getLogger(__name__)

Models = Union[Mapping[str, Any], Sequence[Any]]


def _single_output_coef(est: Any) -> np.ndarray:
    coef = np.asarray(getattr(est, "coef_", None), dtype=float)
    if coef.ndim == 2 and 1 in coef.shape:
        coef = coef.ravel()
    if coef.ndim != 1:
        raise ValueError("Only single-output linear models can be summarized")
    return coef


def summary_from_model(model: Any) -> ModelSummary:
    """Estimates only; no data means no standard errors or fit statistics."""
    est = final_estimator(model)
    if not hasattr(est, "coef_"):
        raise InputValidationError(f"{type(est).__name__} is not a fitted linear model")
    coef = _single_output_coef(est)
    terms = feature_names(model, coef.shape[0])
    estimates = list(coef)
    if getattr(est, "fit_intercept", True):
        terms = [INTERCEPT] + terms
        estimates = [float(np.atleast_1d(est.intercept_)[0])] + estimates
    return ModelSummary(terms=terms, estimates=estimates)


def summarize_linear_model(model: Any, X: Any, y: Any) -> ModelSummary:
    """Classical OLS inference for a fitted linear model on ``(X, y)``.

    Standard errors come from ``sigma^2 (X'X)^-1`` on the design the final
    estimator saw; p-values are two-sided t-tests with ``n - p`` degrees
    of freedom.
    """
    est = final_estimator(model)
    if not hasattr(est, "coef_"):
        raise InputValidationError(f"{type(est).__name__} is not a fitted linear model")
    coef = _single_output_coef(est)
    Xt = X
    if isinstance(model, Pipeline) and len(model.steps) > 1:
        Xt = model[:-1].transform(X)
    Xt = np.asarray(Xt, dtype=float)
    if Xt.ndim == 1:
        Xt = Xt.reshape(-1, 1)
    y = np.asarray(y, dtype=float).ravel()
    n = Xt.shape[0]
    if y.shape[0] != n:
        raise ValueError(f"X has {n} row(s) but y has {y.shape[0]}")
    if Xt.shape[1] != coef.shape[0]:
        raise ValueError(f"Model has {coef.shape[0]} coefficient(s) but X has {Xt.shape[1]} column(s)")

    terms = feature_names(model, coef.shape[0])
    fit_intercept = bool(getattr(est, "fit_intercept", True))
    if fit_intercept:
        design = np.column_stack([np.ones(n), Xt])
        beta = np.concatenate([[float(np.atleast_1d(est.intercept_)[0])], coef])
        terms = [INTERCEPT] + terms
    else:
        design = Xt
        beta = coef
    dof = n - design.shape[1]
    if dof <= 0:
        raise ValueError(f"Need more observations than parameters, got n={n}, p={design.shape[1]}")

    resid = y - design @ beta
    rss = float(resid @ resid)
    sigma2 = rss / dof
    cov = sigma2 * np.linalg.pinv(design.T @ design)
    se = np.sqrt(np.clip(np.diag(cov), 0.0, None))
    with np.errstate(divide="ignore", invalid="ignore"):
        t_stat = beta / se
    p_values = 2.0 * stats.t.sf(np.abs(t_stat), dof)

    tss = float(np.sum((y - y.mean()) ** 2)) if fit_intercept else float(y @ y)
    r2 = 1.0 - rss / tss if tss > 0 else np.nan
    k = n - 1 if fit_intercept else n
    adj = 1.0 - (1.0 - r2) * k / dof if tss > 0 else np.nan
    logger.debug("Summarized %s: n=%d, p=%d, R2=%.4f", type(est).__name__, n, design.shape[1], r2)
    return ModelSummary(
        terms=terms,
        estimates=list(beta),
        std_errors=list(se),
        p_values=list(p_values),
        n_obs=n,
        r_squared=r2,
        adj_r_squared=adj,
    )


def _as_summary(name: str, model: Any) -> ModelSummary:
    if isinstance(model, ModelSummary):
        return model
    try:
        return summary_from_model(model)
    except InputValidationError as e:
        raise InputValidationError(f"Model '{name}': {e}") from e


def _named_models(models: Models) -> Dict[str, ModelSummary]:
    if isinstance(models, Mapping):
        items = [(str(k), v) for k, v in models.items()]
    elif isinstance(models, (list, tuple)):
        items = [(f"Model {i}", m) for i, m in enumerate(models, start=1)]
    else:
        raise InputValidationError("`models` must be a mapping or a list of models")
    if not items:
        raise InputValidationError("`models` is empty")
    return {name: _as_summary(name, m) for name, m in items}


def regression_table(
    models: Models,
    stars: Union[bool, Sequence[float], None] = STARS,
    digits: int = 3,
    se_in_parens: bool = True,
) -> pd.DataFrame:
    """One column per model, one row per term, then the fit statistics.

    Terms appear in first-seen order across models. With ``se_in_parens``
    each term is followed by a row of parenthesized standard errors for the
    models that have them. Statistic rows that no model reports are dropped.
    """
    summaries = _named_models(models)
    terms: List[str] = []
    for s in summaries.values():
        terms.extend(t for t in s.terms if t not in terms)
    show_se = se_in_parens and any(s.std_errors is not None for s in summaries.values())

    rows: List[List[str]] = []
    for term in terms:
        row = [term]
        se_row = [""]
        for s in summaries.values():
            est, se, p = s.lookup(term)
            row.extend(format_with_stars([est], [p], stars=stars, digits=digits))
            se_row.append("" if np.isnan(se) else f"({se:.{digits}f})")
        rows.append(row)
        if show_se:
            rows.append(se_row)

    body = pd.DataFrame(rows, columns=["term"] + list(summaries))
    model_stats = build_model_stats(summaries, digits=digits)
    model_stats = model_stats[(model_stats.iloc[:, 1:] != "").any(axis=1)]
    return pd.concat([body, model_stats], ignore_index=True)


def t2f_regression(
    models: Models,
    stars: Union[bool, Sequence[float], None] = STARS,
    digits: int = 3,
    se_in_parens: bool = True,
    filename: str = "regression_table",
    **t2f_kwargs: Any,
) -> CompileResult:
    """Typeset a comparison of ``models`` through :func:`tabfig.t2f`.

    ``models`` maps names to :class:`ModelSummary` objects or fitted linear
    estimators; a list gets ``Model 1``, ``Model 2``... Use
    :func:`summarize_linear_model` for standard errors and fit statistics.
    """
    table = regression_table(models, stars=stars, digits=digits, se_in_parens=se_in_parens)
    logger.info("Regression table with %d model(s), %d row(s)", table.shape[1] - 1, table.shape[0])
    return t2f(table, filename=filename, **t2f_kwargs)
