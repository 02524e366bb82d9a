"""Pick the winning hyperparameters from a set of tuning results."""

from __future__ import annotations

from typing import Any, Sequence

import pandas as pd

from .errors import ConfigError
from .hyper_tuner import TuningResult
from .metrics import METRIC_NAMES


def _check(results: Sequence[TuningResult], metric: str) -> None:
    if metric not in METRIC_NAMES:
        raise ConfigError(f"Unknown metric {metric!r}; expected one of {METRIC_NAMES}")
    if not results:
        raise ConfigError("No tuning results to select from")


def select_best_result(results: Sequence[TuningResult], metric: str = "roc_auc") -> TuningResult:
    """The candidate with the highest mean ``metric``.

    Ties go to the lowest candidate number, i.e. the first candidate evaluated.
    """
    _check(results, metric)
    in_order = sorted(results, key=lambda r: r.candidate)
    # max() keeps the first of equal keys
    return max(in_order, key=lambda r: r.metric(metric))


def select_best(results: Sequence[TuningResult], metric: str = "roc_auc") -> dict[str, Any]:
    return dict(select_best_result(results, metric).params)


def show_best(results: Sequence[TuningResult], metric: str = "roc_auc", n: int = 5) -> pd.DataFrame:
    """Top ``n`` candidates as a table, best first."""
    _check(results, metric)
    ranked = sorted(results, key=lambda r: (-r.metric(metric), r.candidate))[:n]
    rows = [
        {
            "candidate": r.candidate,
            **r.params,
            "mean_accuracy": r.mean_accuracy,
            "mean_roc_auc": r.mean_roc_auc,
            "std_roc_auc": r.std_roc_auc,
            "n_folds": r.n_folds,
        }
        for r in ranked
    ]
    return pd.DataFrame(rows)
