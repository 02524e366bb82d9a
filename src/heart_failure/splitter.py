from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np
import pandas as pd
from sklearn.model_selection import StratifiedKFold, train_test_split

from .errors import ConfigError
from .utils.logger import get_logger


@dataclass(frozen=True)
class Split:
    """Disjoint train/test partitions; the original row labels are kept."""
    train: pd.DataFrame
    test: pd.DataFrame


@dataclass(frozen=True)
class FoldSet:
    """k stratified folds over a training frame, as positional indices."""
    folds: tuple[tuple[np.ndarray, np.ndarray], ...]

    @property
    def n_folds(self) -> int:
        return len(self.folds)

    def __iter__(self) -> Iterator[tuple[np.ndarray, np.ndarray]]:
        return iter(self.folds)

    def __len__(self) -> int:
        return len(self.folds)


class SplitManager:
    """Seeded, stratified train/test split and k-fold partitioning."""

    def __init__(
        self,
        train_fraction: float = 0.75,
        strata: str = "DEATH_EVENT",
        random_state: int = 42,
    ):
        if not 0 < train_fraction < 1:
            raise ConfigError(f"train_fraction must be in (0, 1), got {train_fraction}")
        self.train_fraction = train_fraction
        self.strata = strata
        self.random_state = random_state
        self.logger = get_logger(self.__class__.__name__)

    def _class_counts(self, df: pd.DataFrame) -> pd.Series:
        if self.strata not in df.columns:
            raise ConfigError(f"Stratification field '{self.strata}' not in dataset")
        return df[self.strata].value_counts()

    def split(self, df: pd.DataFrame) -> Split:
        counts = self._class_counts(df)
        if len(counts) < 2 or counts.min() < 2:
            raise ConfigError(
                f"Stratified split needs at least two records per class; "
                f"got {counts.to_dict()}"
            )

        # floor(f * n); the epsilon keeps 0.29 * 100 = 28.999... at 29
        n_train = int(np.floor(self.train_fraction * len(df) + 1e-9))
        if n_train < len(counts) or len(df) - n_train < len(counts):
            raise ConfigError(
                f"train_fraction={self.train_fraction} leaves a partition smaller "
                f"than the number of classes for {len(df)} records"
            )

        train, test = train_test_split(
            df,
            train_size=n_train,
            stratify=df[self.strata],
            shuffle=True,
            random_state=self.random_state,
        )
        self.logger.info(
            f"Split {len(df):,} records into train={len(train):,} / test={len(test):,} "
            f"(stratified on {self.strata}, seed={self.random_state})"
        )
        return Split(train=train, test=test)

    def folds(self, train: pd.DataFrame, n_folds: int = 10) -> FoldSet:
        counts = self._class_counts(train)
        if n_folds < 2:
            raise ConfigError(f"n_folds must be at least 2, got {n_folds}")
        if n_folds > counts.min():
            raise ConfigError(
                f"n_folds={n_folds} exceeds the minority class size "
                f"({int(counts.min())} records of class {counts.idxmin()!r})"
            )

        skf = StratifiedKFold(n_splits=n_folds, shuffle=True, random_state=self.random_state)
        folds = tuple(
            (train_idx, val_idx)
            for train_idx, val_idx in skf.split(np.zeros(len(train)), train[self.strata])
        )
        self.logger.info(f"Built {n_folds} stratified folds over {len(train):,} train records")
        return FoldSet(folds=folds)
