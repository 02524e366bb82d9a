import pytest

from heart_failure.errors import ConfigError
from heart_failure.hyper_tuner import TuningResult
from heart_failure.selector import select_best, select_best_result, show_best


def _result(candidate, roc_auc, accuracy=0.8, **params):
    return TuningResult(
        candidate=candidate,
        params=params or {"n_estimators": 100 + candidate},
        mean_accuracy=accuracy,
        std_accuracy=0.01,
        mean_roc_auc=roc_auc,
        std_roc_auc=0.02,
        n_folds=10,
    )


def test_select_best_returns_strict_maximum_of_five():
    results = [
        _result(0, 0.81),
        _result(1, 0.86),
        _result(2, 0.92),
        _result(3, 0.88),
        _result(4, 0.79),
    ]
    assert select_best(results, "roc_auc") == {"n_estimators": 102}


def test_select_best_tie_goes_to_first_candidate():
    results = [
        _result(0, 0.80),
        _result(3, 0.91),
        _result(1, 0.91),
        _result(2, 0.85),
        _result(4, 0.70),
    ]
    # candidates 1 and 3 tie; the lower candidate number wins regardless of list order
    assert select_best_result(results, "roc_auc").candidate == 1
    assert select_best(list(reversed(results)), "roc_auc") == {"n_estimators": 101}


def test_select_best_by_accuracy():
    results = [_result(0, 0.9, accuracy=0.70), _result(1, 0.8, accuracy=0.75)]
    assert select_best_result(results, "accuracy").candidate == 1
    assert select_best_result(results, "roc_auc").candidate == 0


def test_select_best_returns_a_copy_of_params():
    results = [_result(0, 0.9)]
    best = select_best(results, "roc_auc")
    best["n_estimators"] = -1
    assert results[0].params == {"n_estimators": 100}


def test_select_best_rejects_unknown_metric():
    with pytest.raises(ConfigError):
        select_best([_result(0, 0.9)], "f1")


def test_select_best_rejects_empty_results():
    with pytest.raises(ConfigError):
        select_best([], "roc_auc")


def test_show_best_lists_top_candidates_best_first():
    results = [_result(i, auc) for i, auc in enumerate([0.7, 0.9, 0.8, 0.9, 0.6])]
    table = show_best(results, "roc_auc", n=3)

    assert table["candidate"].tolist() == [1, 3, 2]
    assert table["mean_roc_auc"].tolist() == [0.9, 0.9, 0.8]
    assert "n_estimators" in table.columns
