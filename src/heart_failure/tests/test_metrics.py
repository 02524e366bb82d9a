import pytest

from heart_failure.errors import ConfigError
from heart_failure.metrics import Metrics, compute_metrics


def test_compute_metrics_uses_half_threshold_on_death_probability():
    y_true = [0, 0, 1, 1]
    y_proba = [0.1, 0.6, 0.4, 0.9]

    metrics = compute_metrics(y_true, y_proba)

    assert metrics.accuracy == pytest.approx(0.5)
    assert metrics.roc_auc == pytest.approx(0.75)


def test_metrics_lookup_by_name():
    metrics = Metrics(accuracy=0.8, roc_auc=0.9)

    assert metrics.get("roc_auc") == 0.9
    assert metrics.to_dict() == {"accuracy": 0.8, "roc_auc": 0.9}


def test_metrics_unknown_name_raises_config_error():
    with pytest.raises(ConfigError, match="f1"):
        Metrics(accuracy=0.8, roc_auc=0.9).get("f1")
