from dataclasses import dataclass, field, fields
from typing import Any, Dict
import os

import yaml

from .errors import ConfigError

METRICS = ("accuracy", "roc_auc")
SAMPLERS = ("tpe", "random")
MISSING_POLICIES = ("fail", "drop")
UNSEEN_POLICIES = ("error", "zero")
AGE_BIN_KEYS = ("start", "stop", "width")


@dataclass
class Config:
    """Configuration object loaded from YAML."""
    data: Dict[str, Any]
    split: Dict[str, Any]
    preprocessing: Dict[str, Any] = field(default_factory=dict)
    model: Dict[str, Any] = field(default_factory=dict)
    tuning: Dict[str, Any] = field(default_factory=dict)
    output: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        if not os.path.exists(path):
            raise ConfigError(f"Config file not found: {path}")
        with open(path, "r") as f:
            cfg = yaml.safe_load(f)
        if not isinstance(cfg, dict):
            raise ConfigError(f"Config file {path} must contain a mapping of sections")
        return cls.from_dict(cfg)

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "Config":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(cfg) - known)
        if unknown:
            raise ConfigError(f"Unknown config sections: {unknown}")
        missing = sorted(name for name in ("data", "split") if name not in cfg)
        if missing:
            raise ConfigError(f"Missing config sections: {missing}")
        sections = {name: dict(value or {}) for name, value in cfg.items()}
        config = cls(**sections)
        config.validate()
        return config

    def validate(self) -> None:
        """Reject values that would only fail later in the run."""
        for key in ("path", "target_col"):
            if not self.data.get(key):
                raise ConfigError(f"data.{key} is required")
        age_bins = self.data.get("age_bins", {})
        if not isinstance(age_bins, dict):
            raise ConfigError(f"data.age_bins must be a mapping, got {age_bins!r}")
        unknown = sorted(set(age_bins) - set(AGE_BIN_KEYS))
        if unknown:
            raise ConfigError(f"data.age_bins has unknown keys {unknown}; expected {AGE_BIN_KEYS}")
        for key, value in age_bins.items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"data.age_bins.{key} must be an integer, got {value!r}")
        sample_size = self.data.get("sample_size")
        if sample_size is not None and (not isinstance(sample_size, int) or sample_size < 1):
            raise ConfigError(f"data.sample_size must be a positive integer, got {sample_size!r}")
        if self.data.get("missing_policy", "fail") not in MISSING_POLICIES:
            raise ConfigError(
                f"data.missing_policy must be one of {MISSING_POLICIES}, "
                f"got {self.data['missing_policy']!r}"
            )

        fraction = self.split.get("train_fraction", 0.75)
        if not isinstance(fraction, (int, float)) or not 0 < fraction < 1:
            raise ConfigError(f"split.train_fraction must be in (0, 1), got {fraction!r}")
        n_folds = self.split.get("n_folds", 10)
        if not isinstance(n_folds, int) or n_folds < 2:
            raise ConfigError(f"split.n_folds must be an integer >= 2, got {n_folds!r}")
        if not isinstance(self.split.get("random_state", 42), int):
            raise ConfigError("split.random_state must be an integer")

        unseen = self.preprocessing.get("unseen_levels", "zero")
        if unseen not in UNSEEN_POLICIES:
            raise ConfigError(
                f"preprocessing.unseen_levels must be one of {UNSEEN_POLICIES}, got {unseen!r}"
            )

        grid_size = self.tuning.get("grid_size", 20)
        if not isinstance(grid_size, int) or grid_size < 1:
            raise ConfigError(f"tuning.grid_size must be a positive integer, got {grid_size!r}")
        if self.tuning.get("metric", "roc_auc") not in METRICS:
            raise ConfigError(
                f"tuning.metric must be one of {METRICS}, got {self.tuning['metric']!r}"
            )
        if self.tuning.get("sampler", "tpe") not in SAMPLERS:
            raise ConfigError(
                f"tuning.sampler must be one of {SAMPLERS}, got {self.tuning['sampler']!r}"
            )

    @property
    def random_state(self) -> int:
        return self.split.get("random_state", 42)
