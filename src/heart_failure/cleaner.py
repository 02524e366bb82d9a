import numpy as np
import pandas as pd

from .data_loader import FLAG_COLUMNS, TARGET_COL, missing_summary
from .errors import ConfigError, DataQualityError
from .utils.logger import get_logger

# (label for 0, label for 1)
FLAG_LABELS = {
    "anaemia": ("No", "Yes"),
    "diabetes": ("No", "Yes"),
    "high_blood_pressure": ("No", "Yes"),
    "sex": ("Female", "Male"),
    "smoking": ("No", "Yes"),
}
AGE_COL = "age"
AGE_GROUP_COL = "age_group"


def _sample_rows(mask: pd.Series, limit: int = 5) -> list:
    return mask[mask].index[:limit].tolist()


class DataCleaner:
    """Recodes clinical flags, buckets age and enforces the missing-data policy."""

    def __init__(
        self,
        age_start: int = 30,
        age_stop: int = 100,
        age_width: int = 10,
        missing_policy: str = "fail",
        target_col: str = TARGET_COL,
    ):
        if age_width <= 0 or age_stop <= age_start or (age_stop - age_start) % age_width:
            raise ConfigError(
                f"Age buckets must evenly cover [{age_start}, {age_stop}) "
                f"with width {age_width}"
            )
        if missing_policy not in ("fail", "drop"):
            raise ConfigError(f"Unknown missing_policy: {missing_policy}")
        self.age_start = age_start
        self.age_stop = age_stop
        self.age_width = age_width
        self.missing_policy = missing_policy
        self.target_col = target_col
        self.logger = get_logger(self.__class__.__name__)

    @property
    def age_edges(self) -> list[int]:
        return list(range(self.age_start, self.age_stop + 1, self.age_width))

    @property
    def age_labels(self) -> list[str]:
        edges = self.age_edges
        # half-open [lo, hi); written "lo-(hi-1)" so labels stay valid feature names
        return [f"{lo}-{hi - 1}" for lo, hi in zip(edges[:-1], edges[1:])]

    def _handle_missing(self, df: pd.DataFrame) -> pd.DataFrame:
        counts = missing_summary(df)
        counts = counts[counts > 0]
        if counts.empty:
            return df

        details = {
            col: {"missing": int(n), "rows": _sample_rows(df[col].isna())}
            for col, n in counts.items()
        }
        if self.missing_policy == "fail":
            raise DataQualityError(
                f"Missing values found in {len(details)} field(s): {details}", fields=details
            )

        out = df.dropna()
        self.logger.warning(
            f"Dropped {len(df) - len(out)} incomplete record(s); missing per field: "
            f"{counts.to_dict()}"
        )
        if out.empty:
            raise DataQualityError("No complete records left after dropping missing values",
                                   fields=details)
        return out

    def _check_binary(self, df: pd.DataFrame, col: str) -> None:
        invalid = ~df[col].isin([0, 1])
        if invalid.any():
            values = sorted(df.loc[invalid, col].unique().tolist())
            raise DataQualityError(
                f"Field '{col}' must be 0/1; found {values} in rows {_sample_rows(invalid)}",
                fields={col: {"invalid": values, "rows": _sample_rows(invalid)}},
            )

    def _bucket_age(self, age: pd.Series) -> pd.Series:
        out_of_range = (age < self.age_start) | (age >= self.age_stop)
        if out_of_range.any():
            raise DataQualityError(
                f"Ages outside [{self.age_start}, {self.age_stop}) in rows "
                f"{_sample_rows(out_of_range)}",
                fields={AGE_COL: {"out_of_range": int(out_of_range.sum()),
                                  "rows": _sample_rows(out_of_range)}},
            )
        return pd.cut(age, bins=self.age_edges, right=False, labels=self.age_labels)

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        if self.target_col not in df.columns:
            raise DataQualityError(
                f"Outcome field '{self.target_col}' is missing from the records",
                fields={self.target_col: "absent"},
            )
        out = self._handle_missing(df.copy())

        self._check_binary(out, self.target_col)
        out[self.target_col] = out[self.target_col].astype(int)

        for col in FLAG_COLUMNS:
            if col not in out.columns:
                continue
            self._check_binary(out, col)
            labels = FLAG_LABELS[col]
            codes = out[col].astype(int).to_numpy()
            out[col] = pd.Categorical(np.asarray(labels)[codes], categories=list(labels))

        if AGE_COL in out.columns:
            position = out.columns.get_loc(AGE_COL)
            age_group = self._bucket_age(out[AGE_COL])
            out = out.drop(columns=[AGE_COL])
            out.insert(position, AGE_GROUP_COL, age_group)

        self.logger.info(
            f"Cleaned {len(out):,} records: {len(FLAG_COLUMNS)} flags recoded, "
            f"age bucketed into {len(self.age_labels)} groups"
        )
        return out
