from typing import Optional

import pandas as pd

from .errors import LoadError
from .utils.logger import get_logger

TARGET_COL = "DEATH_EVENT"
NUMERIC_COLUMNS = [
    "age",
    "creatinine_phosphokinase",
    "ejection_fraction",
    "platelets",
    "serum_creatinine",
    "serum_sodium",
    "time",
]
FLAG_COLUMNS = ["anaemia", "diabetes", "high_blood_pressure", "sex", "smoking"]
SCHEMA_COLUMNS = NUMERIC_COLUMNS + FLAG_COLUMNS + [TARGET_COL]


def schema_columns(target_col: str = TARGET_COL) -> list[str]:
    """Expected input columns with the outcome stored under ``target_col``."""
    return NUMERIC_COLUMNS + FLAG_COLUMNS + [target_col]


def missing_summary(df: pd.DataFrame) -> pd.Series:
    """Number of missing values per field."""
    return df.isna().sum()


class DataLoader:
    """Loads the heart failure CSV, checks its schema and optionally samples rows."""

    def __init__(
        self,
        path: str,
        sample_size: Optional[int] = None,
        random_state: int = 42,
        columns: Optional[list[str]] = None,
        target_col: str = TARGET_COL,
    ):
        self.path = path
        self.sample_size = sample_size
        self.random_state = random_state
        self.target_col = target_col
        self.columns = list(columns or schema_columns(target_col))
        self.logger = get_logger(self.__class__.__name__)

    def _read(self) -> pd.DataFrame:
        try:
            return pd.read_csv(self.path)
        except FileNotFoundError as exc:
            raise LoadError(f"Input file not found: {self.path}") from exc
        except pd.errors.EmptyDataError as exc:
            raise LoadError(f"Input file is empty: {self.path}") from exc
        except (pd.errors.ParserError, UnicodeDecodeError) as exc:
            raise LoadError(f"Input file is malformed: {self.path}: {exc}") from exc
        except OSError as exc:
            raise LoadError(f"Input file is unreadable: {self.path}: {exc}") from exc

    def _check_schema(self, df: pd.DataFrame) -> pd.DataFrame:
        missing = [col for col in self.columns if col not in df.columns]
        if missing:
            raise LoadError(f"Schema mismatch in {self.path}: missing columns {missing}")

        extra = [col for col in df.columns if col not in self.columns]
        if extra:
            self.logger.warning(f"Dropping columns outside the schema: {extra}")

        df = df[self.columns]
        # NaN is allowed here; missingness is judged by the cleaner
        non_numeric = [
            col for col in self.columns if not pd.api.types.is_numeric_dtype(df[col])
        ]
        if non_numeric:
            raise LoadError(
                f"Schema mismatch in {self.path}: non-numeric values in columns {non_numeric}"
            )
        return df

    def load(self) -> pd.DataFrame:
        df = self._check_schema(self._read())
        if df.empty:
            raise LoadError(f"Input file has a header but no records: {self.path}")
        if self.sample_size:
            if self.sample_size > len(df):
                raise LoadError(
                    f"sample_size={self.sample_size} exceeds the {len(df):,} records in {self.path}"
                )
            df = df.sample(self.sample_size, random_state=self.random_state)
        self.logger.info(f"Loaded {self.path}: {df.shape[0]:,} rows x {df.shape[1]} cols")
        return df
