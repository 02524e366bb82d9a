from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
import optuna
import pandas as pd

from .data_loader import TARGET_COL
from .errors import ConfigError
from .metrics import METRIC_NAMES, Metrics, compute_metrics
from .models import FinalizedModel, ModelSpec
from .recipe import Recipe, split_xy
from .splitter import FoldSet
from .utils.logger import get_logger, quieted


@dataclass(frozen=True)
class TuningResult:
    """Cross-validated performance of one hyperparameter candidate."""
    candidate: int
    params: dict[str, Any]
    mean_accuracy: float
    std_accuracy: float
    mean_roc_auc: float
    std_roc_auc: float
    n_folds: int

    def metric(self, name: str) -> float:
        if name not in METRIC_NAMES:
            raise ConfigError(f"Unknown metric {name!r}; expected one of {METRIC_NAMES}")
        return getattr(self, f"mean_{name}")

    @classmethod
    def from_folds(
        cls, candidate: int, params: dict[str, Any], fold_metrics: list[Metrics]
    ) -> "TuningResult":
        scores = {name: np.array([m.get(name) for m in fold_metrics]) for name in METRIC_NAMES}
        accuracy, roc_auc = scores["accuracy"], scores["roc_auc"]
        return cls(
            candidate=candidate,
            params=dict(params),
            mean_accuracy=float(accuracy.mean()),
            std_accuracy=float(accuracy.std()),
            mean_roc_auc=float(roc_auc.mean()),
            std_roc_auc=float(roc_auc.std()),
            n_folds=len(fold_metrics),
        )


class HyperTuner:
    """Optuna search over a ModelSpec's search space with leakage-safe k-fold CV.

    Every candidate is scored on each fold by fitting a fresh Recipe on the
    training part of the fold and applying it to the held-out part.
    """

    def __init__(
        self,
        grid_size: int = 20,
        metric: str = "roc_auc",
        random_state: int = 42,
        sampler: str = "tpe",
        unseen_levels: str = "zero",
        outcome: str = TARGET_COL,
    ):
        if grid_size < 1:
            raise ConfigError(f"grid_size must be positive, got {grid_size}")
        if metric not in METRIC_NAMES:
            raise ConfigError(f"Unknown metric {metric!r}; expected one of {METRIC_NAMES}")
        if sampler not in ("tpe", "random"):
            raise ConfigError(f"Unknown sampler {sampler!r}; expected 'tpe' or 'random'")
        self.grid_size = grid_size
        self.metric = metric
        self.random_state = random_state
        self.sampler = sampler
        self.unseen_levels = unseen_levels
        self.outcome = outcome
        self.logger = get_logger(self.__class__.__name__)

    def _make_sampler(self) -> optuna.samplers.BaseSampler:
        if self.sampler == "random":
            return optuna.samplers.RandomSampler(seed=self.random_state)
        return optuna.samplers.TPESampler(seed=self.random_state)

    def _new_recipe(self) -> Recipe:
        return Recipe(outcome=self.outcome, unseen_levels=self.unseen_levels)

    def cross_validate(
        self,
        finalized: FinalizedModel,
        train: pd.DataFrame,
        folds: FoldSet,
        candidate: int = 0,
    ) -> TuningResult:
        """Score one bound parameter set on every fold."""
        fold_metrics: list[Metrics] = []
        # fold-level recipe warnings would repeat once per candidate
        with quieted("Recipe", logging.ERROR):
            for fold, (train_idx, val_idx) in enumerate(folds, start=1):
                fold_train = train.iloc[train_idx]
                fold_val = train.iloc[val_idx]

                # fit preprocessing only on the training part of the fold
                recipe = self._new_recipe()
                X_train, y_train = split_xy(recipe.fit_apply(fold_train), self.outcome)
                X_val, y_val = split_xy(recipe.apply(fold_val), self.outcome)

                model = finalized.fit(X_train, y_train)
                metrics = compute_metrics(y_val, model.predict_proba(X_val))
                fold_metrics.append(metrics)
                self.logger.debug(
                    f"{finalized.name} candidate {candidate} fold {fold}/{folds.n_folds}: "
                    f"accuracy={metrics.accuracy:.4f} roc_auc={metrics.roc_auc:.4f}"
                )
        return TuningResult.from_folds(candidate, finalized.params, fold_metrics)

    def tune(
        self,
        spec: ModelSpec,
        train: pd.DataFrame,
        folds: FoldSet,
    ) -> list[TuningResult]:
        """
        Evaluate ``grid_size`` sampled candidates and return them ranked by the
        selection metric (best first, ties by candidate number).
        """
        if not spec.requires_tuning:
            raise ConfigError(f"{spec.name} has no search space to tune")

        n_features = self._new_recipe().fit(train).n_features_out_
        space = spec.search_space(n_features)
        self.logger.info(
            f"Tuning {spec.name}: {self.grid_size} candidates x {folds.n_folds}-fold CV "
            f"over {[hp.name for hp in space]} ({self.sampler} sampler, metric={self.metric})"
        )

        optuna.logging.set_verbosity(optuna.logging.WARNING)
        study = optuna.create_study(direction="maximize", sampler=self._make_sampler())
        results: list[TuningResult] = []

        def objective(trial: optuna.Trial) -> float:
            params = {hp.name: hp.suggest(trial) for hp in space}
            result = self.cross_validate(
                FinalizedModel(spec=spec, params=params), train, folds, candidate=trial.number
            )
            results.append(result)
            return result.metric(self.metric)

        study.optimize(objective, n_trials=self.grid_size)

        ranked = sorted(results, key=lambda r: (-r.metric(self.metric), r.candidate))
        best = ranked[0]
        self.logger.info(
            f"Best CV {self.metric} for {spec.name}: {best.metric(self.metric):.4f} "
            f"(candidate {best.candidate})"
        )
        return ranked
