import pytest

from heart_failure.cleaner import DataCleaner
from heart_failure.splitter import SplitManager
from heart_failure.synthetic import make_synthetic_records


@pytest.fixture
def raw_records():
    # 300 records, 2:1 survived:died
    return make_synthetic_records(n_records=300, positive_fraction=1 / 3, random_state=42)


@pytest.fixture
def clean_records(raw_records):
    return DataCleaner().transform(raw_records)


@pytest.fixture
def heart_split(clean_records):
    return SplitManager(train_fraction=0.75, random_state=42).split(clean_records)
