from dataclasses import asdict, dataclass

import numpy as np
from sklearn.metrics import accuracy_score, roc_auc_score

from .errors import ConfigError

METRIC_NAMES = ("accuracy", "roc_auc")


@dataclass(frozen=True)
class Metrics:
    """Accuracy at a 0.5 threshold and ROC AUC of the positive-class probability."""
    accuracy: float
    roc_auc: float

    def get(self, name: str) -> float:
        if name not in METRIC_NAMES:
            raise ConfigError(f"Unknown metric {name!r}; expected one of {METRIC_NAMES}")
        return getattr(self, name)

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def compute_metrics(y_true, y_proba, threshold: float = 0.5) -> Metrics:
    y_true = np.asarray(y_true).astype(int)
    y_proba = np.asarray(y_proba).astype(float)
    y_pred = (y_proba >= threshold).astype(int)
    return Metrics(
        accuracy=float(accuracy_score(y_true, y_pred)),
        roc_auc=float(roc_auc_score(y_true, y_proba)),
    )
