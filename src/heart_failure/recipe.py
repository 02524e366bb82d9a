from __future__ import annotations

import warnings
from typing import Any, Optional

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from .data_loader import TARGET_COL
from .errors import ConfigError, RecipeError, UnseenLevelError
from .utils.logger import get_logger


class Recipe:
    """Two-phase feature transformation: fit on train, apply anywhere.

    Numeric fields are standardized with the train mean and population
    standard deviation. Categorical fields (everything but the outcome) become
    indicator columns, one per observed level except the first (reference)
    level.
    """

    def __init__(
        self,
        outcome: str = TARGET_COL,
        unseen_levels: str = "zero",
        verbose: bool = False,
    ):
        """
        Parameters
        ----------
        outcome:
            Label column. Never transformed; carried through ``apply`` when present.
        unseen_levels:
            ``"error"`` raises UnseenLevelError when ``apply`` meets a level that
            was not seen by ``fit``; ``"zero"`` encodes it as an all-zero
            indicator row for that field and logs a warning.
        verbose:
            If True, logs detected feature groups.
        """
        if unseen_levels not in ("error", "zero"):
            raise ConfigError(f"Unknown unseen_levels policy: {unseen_levels}")
        self.outcome = outcome
        self.unseen_levels = unseen_levels
        self.verbose = verbose
        self.logger = get_logger(self.__class__.__name__)
        self.transformer: Optional[ColumnTransformer] = None
        self.numeric_cols_: list[str] = []
        self.categorical_cols_: list[str] = []
        self.levels_: dict[str, list[Any]] = {}

    @property
    def is_fitted(self) -> bool:
        return self.transformer is not None

    @property
    def feature_names_(self) -> list[str]:
        self._check_fitted()
        return list(self.transformer.get_feature_names_out())

    @property
    def n_features_out_(self) -> int:
        return len(self.feature_names_)

    @property
    def means_(self) -> dict[str, float]:
        scaler = self._scaler()
        return {} if scaler is None else dict(zip(self.numeric_cols_, scaler.mean_.tolist()))

    @property
    def stds_(self) -> dict[str, float]:
        scaler = self._scaler()
        return {} if scaler is None else dict(zip(self.numeric_cols_, scaler.scale_.tolist()))

    def _scaler(self) -> Optional[StandardScaler]:
        self._check_fitted()
        if not self.numeric_cols_:
            return None
        return self.transformer.named_transformers_["num"]

    def _check_fitted(self) -> None:
        if not self.is_fitted:
            raise RecipeError("Recipe is not fitted; call fit() before apply().")

    @staticmethod
    def _observed_levels(series: pd.Series) -> list[Any]:
        observed = set(series.dropna().unique().tolist())
        if isinstance(series.dtype, pd.CategoricalDtype):
            return [level for level in series.cat.categories if level in observed]
        return sorted(observed)

    def fit(self, train: pd.DataFrame) -> "Recipe":
        features = train.drop(columns=[self.outcome], errors="ignore")
        numeric_cols = features.select_dtypes(include=["number"]).columns.tolist()
        categorical_cols = features.select_dtypes(include=["object", "category"]).columns.tolist()

        for col in numeric_cols:
            std = float(features[col].std(ddof=0))
            if not np.isfinite(std) or std == 0.0:
                raise RecipeError(
                    f"Numeric field '{col}' has zero variance in the training data; "
                    f"it cannot be standardized",
                    field=col,
                )

        self.levels_ = {col: self._observed_levels(features[col]) for col in categorical_cols}
        encoder = OneHotEncoder(
            categories=[self.levels_[col] for col in categorical_cols],
            drop="first",
            handle_unknown="ignore",
            sparse_output=False,
            dtype=float,
        )
        transformer = ColumnTransformer(
            transformers=[
                ("num", StandardScaler(), numeric_cols),
                ("cat", encoder, categorical_cols),
            ],
            remainder="drop",
            verbose_feature_names_out=False,
        ).set_output(transform="pandas")
        transformer.fit(features[numeric_cols + categorical_cols])

        self.transformer = transformer
        self.numeric_cols_ = numeric_cols
        self.categorical_cols_ = categorical_cols

        if self.verbose:
            self.logger.info(
                f"Recipe fitted: numeric={len(numeric_cols)}, "
                f"categorical={len(categorical_cols)}, features out={self.n_features_out_}"
            )
        return self

    def _check_levels(self, df: pd.DataFrame) -> bool:
        found_unseen = False
        for col in self.categorical_cols_:
            unseen = set(df[col].dropna().unique().tolist()) - set(self.levels_[col])
            if not unseen:
                continue
            if self.unseen_levels == "error":
                raise UnseenLevelError(col, unseen)
            n_rows = int(df[col].isin(unseen).sum())
            self.logger.warning(
                f"Field '{col}': unseen levels {sorted(map(str, unseen))} in {n_rows} "
                f"record(s) encoded as all-zero indicators"
            )
            found_unseen = True
        return found_unseen

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """Transform ``df`` with the fitted parameters; never refits."""
        self._check_fitted()
        missing = [c for c in self.numeric_cols_ + self.categorical_cols_ if c not in df.columns]
        if missing:
            raise RecipeError(f"Columns missing at apply time: {missing}", field=missing[0])

        found_unseen = self._check_levels(df)
        with warnings.catch_warnings():
            if found_unseen:
                # already reported above
                warnings.filterwarnings("ignore", message="Found unknown categories")
            out = self.transformer.transform(df[self.numeric_cols_ + self.categorical_cols_])

        if self.outcome in df.columns:
            out[self.outcome] = df[self.outcome]
        return out

    def fit_apply(self, train: pd.DataFrame) -> pd.DataFrame:
        return self.fit(train).apply(train)


def split_xy(frame: pd.DataFrame, outcome: str = TARGET_COL) -> tuple[pd.DataFrame, np.ndarray]:
    """Separate an applied frame into predictors and the integer outcome."""
    if outcome not in frame.columns:
        raise RecipeError(f"Outcome column '{outcome}' not in frame", field=outcome)
    return frame.drop(columns=[outcome]), frame[outcome].astype(int).to_numpy()
