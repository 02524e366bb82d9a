from textwrap import indent
from typing import List, Optional

import pandas as pd

from .cleaner import DataCleaner
from .config import Config
from .data_loader import DataLoader
from .errors import PipelineError
from .evaluator import EvaluationResult, Evaluator
from .hyper_tuner import HyperTuner
from .models import build_model_specs
from .recipe import Recipe
from .report import format_report, write_report
from .selector import select_best_result, show_best
from .splitter import SplitManager
from .utils.logger import get_logger


class PipelineRunner:
    """End-to-end heart failure death-event pipeline.

    Steps:
      1. Load the clinical records and check the schema
      2. Recode flags, bucket age, enforce the missing-data policy
      3. Stratified train/test split and k folds over train
      4. Fit the feature recipe on train
      5. Tune random forest and boosted trees with cross-validated search
      6. Select the best candidate per tunable model
      7. Fit each finalized model on train and score it on test
      8. Write the comparison report, metrics and models"""

    def __init__(self, config_path: Optional[str] = None, config: Optional[Config] = None):
        if config is None:
            if config_path is None:
                raise PipelineError("Pass a config path or a Config object")
            config = Config.from_yaml(config_path)
        self.config = config
        self.logger = get_logger(self.__class__.__name__)

    def load(self) -> pd.DataFrame:
        cfg = self.config
        return DataLoader(
            cfg.data["path"],
            cfg.data.get("sample_size"),
            random_state=cfg.random_state,
            target_col=cfg.data["target_col"],
        ).load()

    def run(self, df: Optional[pd.DataFrame] = None) -> List[EvaluationResult]:
        """Run every stage; ``df`` replaces the configured input file when given."""
        try:
            return self._run(df)
        except PipelineError as exc:
            self.logger.error(f"Pipeline aborted: {type(exc).__name__}: {exc}")
            raise

    def _run(self, df: Optional[pd.DataFrame]) -> List[EvaluationResult]:
        cfg = self.config
        target_col = cfg.data["target_col"]
        self.logger.info("Starting heart failure modeling pipeline")

        if df is None:
            df = self.load()

        age_bins = cfg.data.get("age_bins") or {}
        df = DataCleaner(
            age_start=age_bins.get("start", 30),
            age_stop=age_bins.get("stop", 100),
            age_width=age_bins.get("width", 10),
            missing_policy=cfg.data.get("missing_policy", "fail"),
            target_col=target_col,
        ).transform(df)

        splitter = SplitManager(
            train_fraction=cfg.split.get("train_fraction", 0.75),
            strata=cfg.split.get("strata", target_col),
            random_state=cfg.random_state,
        )
        split = splitter.split(df)
        folds = splitter.folds(split.train, cfg.split.get("n_folds", 10))

        unseen_levels = cfg.preprocessing.get("unseen_levels", "zero")
        recipe = Recipe(outcome=target_col, unseen_levels=unseen_levels, verbose=True)
        recipe.fit(split.train)

        metric = cfg.tuning.get("metric", "roc_auc")
        tuner = HyperTuner(
            grid_size=cfg.tuning.get("grid_size", 20),
            metric=metric,
            random_state=cfg.random_state,
            sampler=cfg.tuning.get("sampler", "tpe"),
            unseen_levels=unseen_levels,
            outcome=target_col,
        )
        evaluator = Evaluator(
            metrics_path=cfg.output.get("metrics_path"),
            model_dir=cfg.output.get("model_dir"),
            outcome=target_col,
        )
        evaluator.save_recipe(recipe)

        results: List[EvaluationResult] = []
        for spec in build_model_specs(cfg.model, random_state=cfg.random_state):
            if spec.requires_tuning:
                tuning_results = tuner.tune(spec, split.train, folds)
                best = select_best_result(tuning_results, metric)
                top = show_best(tuning_results, metric, n=cfg.tuning.get("show_best", 5))
                self.logger.info(
                    f"Top candidates for {spec.name}:\n"
                    f"{indent(top.to_string(index=False), ' ' * 4)}"
                )
                finalized = spec.finalize(best.params)
            else:
                finalized = spec.finalize()
                best = tuner.cross_validate(finalized, split.train, folds)
                self.logger.info(
                    f"{spec.name} is fixed; CV {metric}={best.metric(metric):.4f}"
                )

            results.append(
                evaluator.evaluate(finalized, recipe, split.train, split.test, cv_result=best)
            )

        report_path = cfg.output.get("report_path")
        report = write_report(results, report_path) if report_path else format_report(results)
        self.logger.info(f"Model comparison:\n{indent(report, ' ' * 4)}")
        if report_path:
            self.logger.info(f"Saved report: {report_path}")
        self.logger.info("Pipeline finished")
        return results
