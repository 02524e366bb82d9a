"""
Heart Failure Survival — Modular Machine Learning Pipeline

This package predicts the death event of heart failure patients from
clinical records. It compares a logistic regression, a random forest and
LightGBM gradient-boosted trees, tuned with Optuna over stratified
cross-validation and scored on a held-out test set.

Modules:
    config          — Load and validate YAML configuration.
    errors          — Error taxonomy (load, data quality, config, recipe).
    data_loader     — Read the CSV and check its schema.
    cleaner         — Recode flags, bucket age, enforce missing-data policy.
    splitter        — Stratified train/test split and k folds.
    recipe          — Fit-once, apply-many scaling and one-hot encoding.
    models          — Fixed and tunable classifier specifications.
    metrics         — Accuracy and ROC AUC.
    hyper_tuner     — Cross-validated hyperparameter search with Optuna.
    selector        — Choose the best candidate (first-max tie-break).
    evaluator       — Final fit on train, scoring on test, artifacts.
    report          — Human-readable model comparison.
    synthetic       — Generate records in the input schema.
    pipeline        — Orchestrates all components.
    utils.logger    — Unified timestamped console logger.
"""

from .config import Config
from .cleaner import DataCleaner
from .data_loader import DataLoader, missing_summary
from .errors import (
    ConfigError,
    DataQualityError,
    LoadError,
    PipelineError,
    RecipeError,
    UnseenLevelError,
)
from .evaluator import EvaluationResult, Evaluator
from .hyper_tuner import HyperTuner, TuningResult
from .metrics import Metrics
from .models import (
    BoostedTreesSpec,
    FinalizedModel,
    FittedModel,
    FixedModelSpec,
    HyperParameter,
    LogisticRegressionSpec,
    ModelSpec,
    RandomForestSpec,
    TunableModelSpec,
    build_model_specs,
)
from .pipeline import PipelineRunner
from .recipe import Recipe
from .report import build_report, format_report, write_report
from .selector import select_best, show_best
from .splitter import FoldSet, Split, SplitManager

__all__ = [
    "Config",
    "DataCleaner",
    "DataLoader",
    "missing_summary",
    "PipelineError",
    "LoadError",
    "DataQualityError",
    "ConfigError",
    "RecipeError",
    "UnseenLevelError",
    "EvaluationResult",
    "Evaluator",
    "HyperTuner",
    "TuningResult",
    "Metrics",
    "ModelSpec",
    "FixedModelSpec",
    "TunableModelSpec",
    "HyperParameter",
    "FinalizedModel",
    "FittedModel",
    "LogisticRegressionSpec",
    "RandomForestSpec",
    "BoostedTreesSpec",
    "build_model_specs",
    "PipelineRunner",
    "Recipe",
    "build_report",
    "format_report",
    "write_report",
    "select_best",
    "show_best",
    "FoldSet",
    "Split",
    "SplitManager",
]
