import numpy as np
import pandas as pd
import pytest

from heart_failure.cleaner import DataCleaner
from heart_failure.data_loader import TARGET_COL
from heart_failure.errors import ConfigError
from heart_failure.splitter import SplitManager
from heart_failure.synthetic import make_synthetic_records


def test_split_is_deterministic_for_a_seed(clean_records):
    s1 = SplitManager(train_fraction=0.75, random_state=7).split(clean_records)
    s2 = SplitManager(train_fraction=0.75, random_state=7).split(clean_records)

    pd.testing.assert_frame_equal(s1.train, s2.train)
    pd.testing.assert_frame_equal(s1.test, s2.test)


def test_split_changes_with_seed(clean_records):
    s1 = SplitManager(random_state=1).split(clean_records)
    s2 = SplitManager(random_state=2).split(clean_records)
    assert list(s1.test.index) != list(s2.test.index)


def test_split_is_disjoint_and_complete(heart_split, clean_records):
    train_ids = set(heart_split.train.index)
    test_ids = set(heart_split.test.index)

    assert train_ids.isdisjoint(test_ids)
    assert train_ids | test_ids == set(clean_records.index)
    assert len(heart_split.train) + len(heart_split.test) == len(clean_records)


def test_split_300_records_two_to_one_gives_75_test_records(heart_split):
    test = heart_split.test
    assert len(test) == 75
    counts = test[TARGET_COL].value_counts()
    # 2:1 within one record
    assert abs(counts[0] - 2 * counts[1]) <= 2
    assert counts[0] == 50 and counts[1] == 25


def test_split_class_ratio_within_one_record(clean_records):
    for seed in (0, 13, 42, 2024):
        split = SplitManager(train_fraction=0.7, random_state=seed).split(clean_records)
        full_ratio = clean_records[TARGET_COL].mean()
        for part in (split.train, split.test):
            assert abs(part[TARGET_COL].mean() - full_ratio) <= 1 / len(part)


def test_split_schema_is_identical_across_partitions(heart_split):
    assert list(heart_split.train.columns) == list(heart_split.test.columns)
    pd.testing.assert_series_equal(heart_split.train.dtypes, heart_split.test.dtypes)


@pytest.mark.parametrize("fraction", [0.0, 1.0, -0.5, 1.5])
def test_split_rejects_fraction_outside_unit_interval(fraction):
    with pytest.raises(ConfigError):
        SplitManager(train_fraction=fraction)


def test_split_rejects_missing_strata_field(clean_records):
    with pytest.raises(ConfigError, match="not in dataset"):
        SplitManager(strata="outcome").split(clean_records)


def test_split_rejects_single_class(clean_records):
    one_class = clean_records[clean_records[TARGET_COL] == 0]
    with pytest.raises(ConfigError):
        SplitManager().split(one_class)


def test_folds_hold_out_every_record_exactly_once(heart_split):
    train = heart_split.train
    folds = SplitManager(random_state=42).folds(train, n_folds=5)

    assert folds.n_folds == 5
    held_out = np.concatenate([val_idx for _, val_idx in folds])
    assert sorted(held_out.tolist()) == list(range(len(train)))
    for train_idx, val_idx in folds:
        assert set(train_idx).isdisjoint(val_idx)
        assert len(train_idx) + len(val_idx) == len(train)
        # stratified: every fold sees both classes
        assert set(train[TARGET_COL].iloc[val_idx]) == {0, 1}


def test_folds_are_roughly_equal_sized(heart_split):
    folds = SplitManager().folds(heart_split.train, n_folds=10)
    sizes = [len(val_idx) for _, val_idx in folds]
    assert max(sizes) - min(sizes) <= 2


def test_folds_are_deterministic(heart_split):
    f1 = SplitManager(random_state=3).folds(heart_split.train, n_folds=4)
    f2 = SplitManager(random_state=3).folds(heart_split.train, n_folds=4)
    for (a_train, a_val), (b_train, b_val) in zip(f1, f2):
        np.testing.assert_array_equal(a_train, b_train)
        np.testing.assert_array_equal(a_val, b_val)


def test_folds_reject_k_above_minority_class_size(heart_split):
    train = heart_split.train
    minority = int(train[TARGET_COL].value_counts().min())
    with pytest.raises(ConfigError, match="minority"):
        SplitManager().folds(train, n_folds=minority + 1)


def test_folds_reject_k_below_two(heart_split):
    with pytest.raises(ConfigError):
        SplitManager().folds(heart_split.train, n_folds=1)


def test_split_train_size_survives_float_rounding():
    records = DataCleaner().transform(
        make_synthetic_records(n_records=100, positive_fraction=0.3, random_state=7)
    )
    # 0.29 * 100 evaluates to 28.999...
    split = SplitManager(train_fraction=0.29, random_state=0).split(records)
    assert len(split.train) == 29
    assert len(split.test) == 71
