from typing import Optional

import numpy as np
import pandas as pd

from .data_loader import SCHEMA_COLUMNS, TARGET_COL


def make_synthetic_records(
    n_records: int = 300,
    positive_fraction: float = 1 / 3,
    random_state: Optional[int] = 42,
) -> pd.DataFrame:
    """
    Generate heart failure records in the input schema.

    Exactly ``round(n_records * positive_fraction)`` records have
    DEATH_EVENT == 1. Deaths skew toward lower ejection fraction, higher
    serum creatinine, older age and shorter follow-up, so models have a
    signal to find.
    """
    rng = np.random.default_rng(random_state)
    n_pos = int(round(n_records * positive_fraction))
    death = np.zeros(n_records, dtype=int)
    death[:n_pos] = 1
    rng.shuffle(death)

    age = np.clip(rng.normal(60 + 6 * death, 11), 40, 95).round()
    ejection_fraction = np.clip(rng.normal(40 - 7 * death, 11), 14, 80).round()
    serum_creatinine = np.clip(rng.lognormal(0.15 + 0.3 * death, 0.35), 0.5, 9.4).round(1)
    time = np.clip(rng.normal(150 - 80 * death, 60), 4, 285).round()

    df = pd.DataFrame(
        {
            "age": age,
            "anaemia": rng.binomial(1, 0.43, n_records),
            "creatinine_phosphokinase": np.clip(rng.lognormal(5.8, 1.0, n_records), 23, 7861).round(),
            "diabetes": rng.binomial(1, 0.42, n_records),
            "ejection_fraction": ejection_fraction,
            "high_blood_pressure": rng.binomial(1, 0.35, n_records),
            "platelets": np.clip(rng.normal(263000, 97000, n_records), 25100, 850000).round(),
            "serum_creatinine": serum_creatinine,
            "serum_sodium": np.clip(rng.normal(136.6, 4.4, n_records), 113, 148).round(),
            "sex": rng.binomial(1, 0.65, n_records),
            "smoking": rng.binomial(1, 0.32, n_records),
            "time": time,
            TARGET_COL: death,
        }
    )
    return df[SCHEMA_COLUMNS]
