import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import joblib
import pandas as pd

from .data_loader import TARGET_COL
from .hyper_tuner import TuningResult
from .metrics import Metrics, compute_metrics
from .models import FinalizedModel
from .recipe import Recipe, split_xy
from .utils.logger import get_logger


@dataclass(frozen=True)
class EvaluationResult:
    """Held-out performance of one finalized model. Not mutated after creation."""
    model: str
    params: Dict[str, Any]
    metrics: Metrics
    test_class_counts: Dict[int, int]
    n_train: int
    n_test: int
    cv: Optional[TuningResult] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "model": self.model,
            "params": self.params,
            **self.metrics.to_dict(),
            "test_class_counts": {str(k): v for k, v in self.test_class_counts.items()},
            "n_train": self.n_train,
            "n_test": self.n_test,
        }
        if self.cv is not None:
            out["cv_accuracy"] = self.cv.mean_accuracy
            out["cv_roc_auc"] = self.cv.mean_roc_auc
            out["cv_folds"] = self.cv.n_folds
        return out


class Evaluator:
    """Fit finalized models once on train, score them on test, save metrics and models."""

    def __init__(
        self,
        metrics_path: Optional[str] = None,
        model_dir: Optional[str] = None,
        outcome: str = TARGET_COL,
        verbose: bool = True,
    ):
        self.metrics_path = metrics_path
        self.model_dir = model_dir
        self.outcome = outcome
        self.verbose = verbose
        self.logger = get_logger(self.__class__.__name__)
        self.results: List[EvaluationResult] = []

    def class_counts(self, df: pd.DataFrame) -> Dict[int, int]:
        counts = df[self.outcome].astype(int).value_counts()
        return {label: int(counts.get(label, 0)) for label in (0, 1)}

    def evaluate(
        self,
        finalized: FinalizedModel,
        recipe: Recipe,
        train: pd.DataFrame,
        test: pd.DataFrame,
        cv_result: Optional[TuningResult] = None,
    ) -> EvaluationResult:
        """Single fit on the full train set, single scoring pass on the test set."""
        X_train, y_train = split_xy(recipe.apply(train), self.outcome)
        X_test, y_test = split_xy(recipe.apply(test), self.outcome)

        model = finalized.fit(X_train, y_train)
        metrics = compute_metrics(y_test, model.predict_proba(X_test))

        result = EvaluationResult(
            model=finalized.name,
            params=dict(finalized.params),
            metrics=metrics,
            test_class_counts=self.class_counts(test),
            n_train=len(train),
            n_test=len(test),
            cv=cv_result,
        )
        self.results.append(result)

        if self.verbose:
            self.logger.info(
                f"{result.model}: test accuracy={metrics.accuracy:.4f} "
                f"roc_auc={metrics.roc_auc:.4f}"
            )
        if self.model_dir:
            self._save_model(finalized.name, model.estimator)
        if self.metrics_path:
            self._save_metrics()
        return result

    def _save_model(self, name: str, estimator: Any) -> None:
        os.makedirs(self.model_dir, exist_ok=True)
        path = os.path.join(self.model_dir, f"{name}.joblib")
        joblib.dump(estimator, path)
        if self.verbose:
            self.logger.info(f"Saved model: {path}")

    def save_recipe(self, recipe: Recipe) -> Optional[str]:
        if not self.model_dir:
            return None
        os.makedirs(self.model_dir, exist_ok=True)
        path = os.path.join(self.model_dir, "recipe.joblib")
        joblib.dump(recipe.transformer, path)
        if self.verbose:
            self.logger.info(f"Saved recipe transformer: {path}")
        return path

    def _save_metrics(self) -> None:
        directory = os.path.dirname(self.metrics_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.metrics_path, "w") as f:
            json.dump([r.to_dict() for r in self.results], f, indent=4)
        if self.verbose:
            self.logger.info(f"Saved metrics: {self.metrics_path}")
