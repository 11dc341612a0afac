from __future__ import annotations

from typing import Any, List, Mapping

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator
from sklearn.pipeline import Pipeline

from ..coefs import INTERCEPT, build_coef_table
from ..errors import InputValidationError
from .registry import register_adapter


# Plain containers. Registration order matters only for overlapping
# predicates; later entries are tried first.
register_adapter("dataframe", lambda x: isinstance(x, pd.DataFrame), lambda x: x)

register_adapter("series", lambda x: isinstance(x, pd.Series), lambda x: x.to_frame())


def _ndarray_to_frame(x: np.ndarray) -> pd.DataFrame:
    if x.ndim == 1:
        x = x.reshape(-1, 1)
    if x.ndim != 2:
        raise InputValidationError(f"Only 1-D or 2-D arrays are tabular, got {x.ndim}-D")
    return pd.DataFrame(x, columns=[f"V{i}" for i in range(1, x.shape[1] + 1)])


register_adapter("ndarray", lambda x: isinstance(x, np.ndarray), _ndarray_to_frame)

register_adapter("mapping", lambda x: isinstance(x, Mapping), lambda x: pd.DataFrame(dict(x)))


def _is_records(x: Any) -> bool:
    return isinstance(x, (list, tuple)) and bool(x) and all(isinstance(r, Mapping) for r in x)


register_adapter("records", _is_records, lambda x: pd.DataFrame.from_records(list(x)))


def final_estimator(x: Any) -> Any:
    return x.steps[-1][1] if isinstance(x, Pipeline) else x


def _is_linear_model(x: Any) -> bool:
    est = final_estimator(x)
    return isinstance(est, BaseEstimator) and hasattr(est, "coef_")


def feature_names(model: Any, n_features: int) -> List[str]:
    names = getattr(model, "feature_names_in_", None)
    if names is None and isinstance(model, Pipeline):
        names = getattr(model.steps[0][1], "feature_names_in_", None)
    if names is None or len(names) != n_features:
        return [f"x{i}" for i in range(1, n_features + 1)]
    return [str(n) for n in names]


def _sklearn_linear_to_frame(model: Any) -> pd.DataFrame:
    """Coefficient table of a fitted scikit-learn linear estimator.

    Multi-output and multi-class models get one estimate column per target
    or class.
    """
    est = final_estimator(model)
    coef = np.atleast_2d(np.asarray(est.coef_, dtype=float))
    if coef.shape[0] > coef.shape[1] and coef.shape[1] == 1:
        coef = coef.T
    terms = feature_names(model, coef.shape[1])
    intercept = np.atleast_1d(np.asarray(getattr(est, "intercept_", 0.0), dtype=float))
    with_intercept = bool(getattr(est, "fit_intercept", True)) and np.any(intercept != 0.0)
    if with_intercept:
        terms = [INTERCEPT] + terms

    if coef.shape[0] == 1:
        values = coef[0]
        if with_intercept:
            values = np.concatenate([intercept[:1], values])
        return build_coef_table(terms, values)

    labels = getattr(est, "classes_", None)
    if labels is None or len(labels) != coef.shape[0]:
        labels = range(1, coef.shape[0] + 1)
    frame = pd.DataFrame({"term": terms})
    for k, label in enumerate(labels):
        values = coef[k]
        if with_intercept:
            values = np.concatenate([intercept[min(k, len(intercept) - 1):][:1], values])
        frame[f"estimate_{label}"] = np.round(values, 3)
    return frame


register_adapter("sklearn_linear", _is_linear_model, _sklearn_linear_to_frame)
