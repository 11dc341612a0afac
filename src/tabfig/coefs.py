"""Coefficient tables for fitted linear models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

INTERCEPT = "(Intercept)"


def format_pvalue(p: float, digits: int = 3) -> str:
    """Format a p-value, collapsing anything below ``10**-digits`` to ``<0.001`` style."""
    if p is None or (isinstance(p, float) and np.isnan(p)):
        return ""
    p = float(p)
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"p-value must lie in [0, 1], got {p}")
    threshold = 10.0 ** (-digits)
    if p < threshold:
        return f"<{threshold:.{digits}f}"
    return f"{p:.{digits}f}"


def build_coef_table(
    terms: Sequence[str],
    estimates: Sequence[float],
    std_errors: Optional[Sequence[float]] = None,
    p_values: Optional[Sequence[float]] = None,
    digits: int = 3,
) -> pd.DataFrame:
    """Tidy ``term / estimate [/ std_error] [/ p_value]`` frame.

    Estimates and standard errors are rounded to ``digits``; p-values are
    formatted as strings with :func:`format_pvalue`. Inputs are taken as
    given, nothing is estimated here.
    """
    terms = [str(t) for t in terms]
    est = np.asarray(estimates, dtype=float).ravel()
    if est.shape[0] != len(terms):
        raise ValueError(f"Got {len(terms)} term(s) but {est.shape[0]} estimate(s)")
    data = {"term": terms, "estimate": np.round(est, digits)}
    if std_errors is not None:
        se = np.asarray(std_errors, dtype=float).ravel()
        if se.shape[0] != len(terms):
            raise ValueError("std_errors length does not match terms")
        data["std_error"] = np.round(se, digits)
    if p_values is not None:
        pv = list(p_values)
        if len(pv) != len(terms):
            raise ValueError("p_values length does not match terms")
        data["p_value"] = [format_pvalue(p, digits) for p in pv]
    return pd.DataFrame(data)


STARS = (0.05, 0.01, 0.001)


def _missing(v) -> bool:
    return v is None or (isinstance(v, (float, np.floating)) and np.isnan(v))


def format_with_stars(
    estimates: Sequence[float],
    p_values: Optional[Sequence[Optional[float]]] = None,
    stars: Union[bool, Sequence[float], None] = STARS,
    digits: int = 3,
) -> List[str]:
    """Estimates as fixed-point strings with significance stars.

    A p-value below ``k`` of the ``stars`` thresholds earns ``k`` stars.
    ``stars=True`` uses the conventional 0.05/0.01/0.001; ``False`` or
    ``None`` disables them. Missing estimates become ``""``.
    """
    if stars is True:
        stars = STARS
    thresholds = sorted(stars or (), reverse=True)
    for t in thresholds:
        if not 0.0 < t <= 1.0:
            raise ValueError(f"Star thresholds must lie in (0, 1], got {t}")
    est = list(estimates)
    pv = list(p_values) if p_values is not None else [None] * len(est)
    if len(pv) != len(est):
        raise ValueError("p_values length does not match estimates")
    out = []
    for e, p in zip(est, pv):
        if _missing(e):
            out.append("")
            continue
        s = f"{float(e):.{digits}f}"
        if not _missing(p):
            s += "*" * sum(float(p) < t for t in thresholds)
        out.append(s)
    return out


@dataclass
class ModelSummary:
    """Coefficients and fit statistics of one model, ready for tabulation."""

    terms: List[str]
    estimates: List[float]
    std_errors: Optional[List[float]] = None
    p_values: Optional[List[float]] = None
    n_obs: Optional[int] = None
    r_squared: Optional[float] = None
    adj_r_squared: Optional[float] = None

    def __post_init__(self) -> None:
        self.terms = [str(t) for t in self.terms]
        self.estimates = [float(e) for e in self.estimates]
        if len(self.estimates) != len(self.terms):
            raise ValueError(f"Got {len(self.terms)} term(s) but {len(self.estimates)} estimate(s)")
        for attr in ("std_errors", "p_values"):
            values = getattr(self, attr)
            if values is not None:
                values = [float(v) for v in values]
                if len(values) != len(self.terms):
                    raise ValueError(f"{attr} length does not match terms")
                setattr(self, attr, values)

    def lookup(self, term: str) -> Tuple[float, float, float]:
        """``(estimate, std_error, p_value)`` for ``term``; NaN where unknown."""
        if term not in self.terms:
            return np.nan, np.nan, np.nan
        i = self.terms.index(term)
        se = self.std_errors[i] if self.std_errors is not None else np.nan
        p = self.p_values[i] if self.p_values is not None else np.nan
        return self.estimates[i], se, p

    def coef_table(self, digits: int = 3) -> pd.DataFrame:
        return build_coef_table(self.terms, self.estimates, self.std_errors, self.p_values, digits)


STAT_ROWS = (("N", "n_obs"), ("R-squared", "r_squared"), ("Adj. R-squared", "adj_r_squared"))


def build_model_stats(models: Mapping[str, ModelSummary], digits: int = 3) -> pd.DataFrame:
    """``N`` / ``R-squared`` / ``Adj. R-squared`` rows, one column per model."""
    data = {"term": [label for label, _ in STAT_ROWS]}
    for name, summary in models.items():
        column = []
        for _, attr in STAT_ROWS:
            value = getattr(summary, attr)
            if _missing(value):
                column.append("")
            elif attr == "n_obs":
                column.append(str(int(value)))
            else:
                column.append(f"{float(value):.{digits}f}")
        data[str(name)] = column
    return pd.DataFrame(data)
