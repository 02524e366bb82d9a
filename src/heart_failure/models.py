"""
Classifier specifications.

A ModelSpec is either fixed (no search space, fit as configured) or tunable
(a typed hyperparameter search space that must be bound before fitting).
Binding happens through ``finalize``, which validates every value against its
declared range and returns a FinalizedModel ready for a single fit.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Literal, Optional

import numpy as np
import pandas as pd
from lightgbm import LGBMClassifier
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression

from .errors import ConfigError


@dataclass(frozen=True)
class HyperParameter:
    """One tunable parameter. ``high=None`` means "number of predictors"."""
    name: str
    kind: Literal["int", "float"]
    low: float
    high: Optional[float] = None
    log: bool = False

    def resolve(self, n_features: Optional[int]) -> "HyperParameter":
        if self.high is not None:
            return self
        if n_features is None:
            raise ConfigError(
                f"Upper bound of '{self.name}' depends on the number of predictors; "
                f"pass n_features"
            )
        return replace(self, high=n_features)

    def suggest(self, trial) -> Any:
        """Draw a value from an Optuna trial."""
        if self.high is None:
            raise ConfigError(f"Unresolved upper bound for '{self.name}'")
        if self.kind == "int":
            return trial.suggest_int(self.name, int(self.low), int(self.high), log=self.log)
        return trial.suggest_float(self.name, float(self.low), float(self.high), log=self.log)

    def validate(self, value: Any) -> Any:
        if self.kind == "int":
            if isinstance(value, bool) or not float(value).is_integer():
                raise ConfigError(f"'{self.name}' must be an integer, got {value!r}")
            value = int(value)
        else:
            value = float(value)
            if not math.isfinite(value):
                raise ConfigError(f"'{self.name}' must be finite, got {value!r}")
        upper = math.inf if self.high is None else self.high
        if not self.low <= value <= upper:
            raise ConfigError(
                f"'{self.name}'={value!r} outside its valid range [{self.low}, {self.high}]"
            )
        return value


@dataclass
class FittedModel:
    """A fitted estimator together with the hyperparameters it was fit with."""
    name: str
    params: dict[str, Any]
    estimator: Any

    def predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        """Probability of the positive class (outcome == 1)."""
        proba = self.estimator.predict_proba(np.asarray(X, dtype=float))
        positive = list(self.estimator.classes_).index(1)
        return proba[:, positive]

    def predict(self, X: pd.DataFrame, threshold: float = 0.5) -> np.ndarray:
        return (self.predict_proba(X) >= threshold).astype(int)


class ModelSpec:
    """Common contract: mode, tuning capability, search space, fit/predict_proba."""

    name: ClassVar[str] = ""
    mode: ClassVar[str] = "classification"
    requires_tuning: ClassVar[bool] = False

    def __init__(self, params: Optional[dict[str, Any]] = None):
        self.params = dict(params or {})

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(params={self.params})"

    def search_space(self, n_features: Optional[int] = None) -> tuple[HyperParameter, ...]:
        return ()

    def finalize(self, params: Optional[dict[str, Any]] = None) -> "FinalizedModel":
        raise NotImplementedError

    def _build(self, params: dict[str, Any], n_features: int) -> Any:
        raise NotImplementedError

    def fit(
        self,
        X: pd.DataFrame,
        y: np.ndarray,
        params: Optional[dict[str, Any]] = None,
    ) -> FittedModel:
        X_arr = np.asarray(X, dtype=float)
        y_arr = np.asarray(y).astype(int)
        bound = dict(params or {})
        estimator = self._build(bound, n_features=X_arr.shape[1])
        estimator.fit(X_arr, y_arr)
        return FittedModel(name=self.name, params=bound, estimator=estimator)

    def predict_proba(self, model: FittedModel, X: pd.DataFrame) -> np.ndarray:
        return model.predict_proba(X)


class FixedModelSpec(ModelSpec):
    """A model fit once with its configured parameters."""

    requires_tuning: ClassVar[bool] = False

    def finalize(self, params: Optional[dict[str, Any]] = None) -> "FinalizedModel":
        if params:
            raise ConfigError(f"{self.name} has no tunable hyperparameters, got {params}")
        return FinalizedModel(spec=self, params={})


class TunableModelSpec(ModelSpec):
    """A model whose hyperparameters come from a declared search space."""

    requires_tuning: ClassVar[bool] = True
    default_space: ClassVar[tuple[HyperParameter, ...]] = ()

    def __init__(
        self,
        params: Optional[dict[str, Any]] = None,
        space_overrides: Optional[dict[str, Any]] = None,
    ):
        super().__init__(params)
        self._space = self._apply_overrides(space_overrides or {})

    def _apply_overrides(self, overrides: dict[str, Any]) -> tuple[HyperParameter, ...]:
        by_name = {hp.name: hp for hp in self.default_space}
        unknown = sorted(set(overrides) - set(by_name))
        if unknown:
            raise ConfigError(f"{self.name}: unknown search-space parameters {unknown}")
        for name, bounds in overrides.items():
            if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
                raise ConfigError(f"{self.name}.{name}: range must be [low, high], got {bounds!r}")
            low, high = bounds
            if high is not None and low > high:
                raise ConfigError(f"{self.name}.{name}: low {low} exceeds high {high}")
            by_name[name] = replace(by_name[name], low=low, high=high)
        return tuple(by_name[hp.name] for hp in self.default_space)

    def search_space(self, n_features: Optional[int] = None) -> tuple[HyperParameter, ...]:
        if n_features is None:
            return self._space
        return tuple(hp.resolve(n_features) for hp in self._space)

    def finalize(self, params: Optional[dict[str, Any]] = None) -> "FinalizedModel":
        params = dict(params or {})
        space = {hp.name: hp for hp in self._space}
        unknown = sorted(set(params) - set(space))
        if unknown:
            raise ConfigError(f"{self.name}: unknown hyperparameters {unknown}")
        missing = sorted(set(space) - set(params))
        if missing:
            raise ConfigError(f"{self.name}: hyperparameters not bound: {missing}")
        bound = {name: space[name].validate(value) for name, value in params.items()}
        return FinalizedModel(spec=self, params=bound)


@dataclass(frozen=True)
class FinalizedModel:
    """A ModelSpec with its hyperparameters bound, ready for one fit."""
    spec: ModelSpec
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.spec.name

    def fit(self, X: pd.DataFrame, y: np.ndarray) -> FittedModel:
        return self.spec.fit(X, y, self.params)


class LogisticRegressionSpec(FixedModelSpec):
    name = "logistic_regression"

    def _build(self, params: dict[str, Any], n_features: int) -> LogisticRegression:
        kwargs = {"max_iter": 1000}
        kwargs.update(self.params)
        return LogisticRegression(**kwargs)


class RandomForestSpec(TunableModelSpec):
    name = "random_forest"
    default_space = (
        HyperParameter("max_features", "int", 1, None),
        HyperParameter("n_estimators", "int", 100, 1000),
        HyperParameter("min_samples_leaf", "int", 2, 40),
    )

    def _build(self, params: dict[str, Any], n_features: int) -> RandomForestClassifier:
        kwargs = {"random_state": 42}
        kwargs.update(self.params)
        kwargs.update(params)
        if "max_features" in kwargs:
            # bounded by the predictor count of the data being fit
            kwargs["max_features"] = min(int(kwargs["max_features"]), n_features)
        return RandomForestClassifier(**kwargs)


class BoostedTreesSpec(TunableModelSpec):
    name = "boosted_trees"
    default_space = (
        HyperParameter("colsample_bytree", "float", 0.1, 1.0),
        HyperParameter("n_estimators", "int", 100, 1000),
        HyperParameter("min_child_samples", "int", 2, 40),
        HyperParameter("max_depth", "int", 1, 15),
        HyperParameter("learning_rate", "float", 0.001, 0.3, log=True),
    )

    def _build(self, params: dict[str, Any], n_features: int) -> LGBMClassifier:
        kwargs = {"random_state": 42, "verbosity": -1}
        kwargs.update(self.params)
        kwargs.update(params)
        return LGBMClassifier(**kwargs)

    def fit(
        self,
        X: pd.DataFrame,
        y: np.ndarray,
        params: Optional[dict[str, Any]] = None,
    ) -> FittedModel:
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", category=UserWarning, module="lightgbm")
            return super().fit(X, y, params)


MODEL_REGISTRY: dict[str, type[ModelSpec]] = {
    LogisticRegressionSpec.name: LogisticRegressionSpec,
    RandomForestSpec.name: RandomForestSpec,
    BoostedTreesSpec.name: BoostedTreesSpec,
}


def build_model_specs(
    model_cfg: Optional[dict[str, Any]] = None,
    random_state: int = 42,
) -> list[ModelSpec]:
    """Build specs from the ``model`` config section (all three when empty)."""
    model_cfg = model_cfg or {name: {} for name in MODEL_REGISTRY}
    unknown = sorted(set(model_cfg) - set(MODEL_REGISTRY))
    if unknown:
        raise ConfigError(f"Unknown models {unknown}; available: {sorted(MODEL_REGISTRY)}")

    specs: list[ModelSpec] = []
    for name, section in model_cfg.items():
        section = dict(section or {})
        cls = MODEL_REGISTRY[name]
        params = dict(section.get("params") or {})
        if cls is not LogisticRegressionSpec:
            params.setdefault("random_state", random_state)
        if issubclass(cls, TunableModelSpec):
            specs.append(cls(params=params, space_overrides=section.get("search_space")))
        else:
            if section.get("search_space"):
                raise ConfigError(f"{name} is a fixed model and takes no search_space")
            specs.append(cls(params=params))
    return specs
