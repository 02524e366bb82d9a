import os
from textwrap import indent
from typing import Sequence

import pandas as pd

from .errors import ConfigError
from .evaluator import EvaluationResult


def build_report(results: Sequence[EvaluationResult]) -> pd.DataFrame:
    """One row per model, best held-out ROC AUC first."""
    rows = []
    for r in results:
        row = {
            "model": r.model,
            "test_accuracy": r.metrics.accuracy,
            "test_roc_auc": r.metrics.roc_auc,
            "cv_accuracy": r.cv.mean_accuracy if r.cv is not None else float("nan"),
            "cv_roc_auc": r.cv.mean_roc_auc if r.cv is not None else float("nan"),
        }
        rows.append(row)
    table = pd.DataFrame(rows)
    if table.empty:
        return table
    return table.sort_values("test_roc_auc", ascending=False, kind="stable").reset_index(drop=True)


def format_report(results: Sequence[EvaluationResult]) -> str:
    if not results:
        raise ConfigError("No evaluation results to report")
    first = results[0]
    counts = first.test_class_counts
    lines = [
        "Heart failure death-event model comparison",
        f"Train records: {first.n_train}, test records: {first.n_test}",
        f"Test class balance: survived={counts.get(0, 0)}, died={counts.get(1, 0)}",
        "",
        build_report(results).to_string(index=False, float_format=lambda v: f"{v:.4f}"),
        "",
        "Selected hyperparameters:",
    ]
    for r in results:
        params = ", ".join(f"{k}={v:.4g}" if isinstance(v, float) else f"{k}={v}"
                           for k, v in r.params.items())
        lines.append(indent(f"{r.model}: {params or '(fixed)'}", " " * 4))
    return "\n".join(lines) + "\n"


def write_report(results: Sequence[EvaluationResult], path: str) -> str:
    text = format_report(results)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w") as f:
        f.write(text)
    return text
