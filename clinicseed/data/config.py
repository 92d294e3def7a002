"""Seeding run configuration.

Defaults live on ``SeedConfig``; a YAML file can override any field, the
``CLINICSEED_MEDICATIONS`` environment variable overrides the file's catalog
path, and the CLI overrides both. Multipliers and probabilities are tunable
constants, not laws, so they are exposed here rather than buried in the
generator.
"""

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from clinicseed.data.medications import DEFAULT_MEDICATIONS_PATH
from clinicseed.data.schema import BillingStatus, Specialization
from clinicseed.errors import ConfigError


def default_multipliers() -> dict[str, float]:
    return {
        Specialization.CARDIOLOGY.value: 2.0,
        Specialization.DERMATOLOGY.value: 1.25,
        Specialization.PEDIATRICS.value: 1.0,
        Specialization.GENERAL_PRACTICE.value: 1.0,
    }


def default_status_weights() -> dict[str, float]:
    return {
        BillingStatus.PAID.value: 0.60,
        BillingStatus.PENDING.value: 0.25,
        BillingStatus.DUE.value: 0.15,
    }


@dataclass
class SeedConfig:
    """Everything a seeding run can be tuned with."""

    # Volumes
    patient_count: int = 10
    physician_count: int = 20
    max_prescriptions_per_patient: int = 15
    max_appointments_per_patient: int = 30

    # Reproducibility and inputs
    seed: Optional[int] = None
    medications_path: str = str(DEFAULT_MEDICATIONS_PATH)
    output_dir: str = "./data/seeded"

    # Accounts
    demo_password: str = "password123"
    bcrypt_rounds: int = 10

    # Patients and prescriptions
    dob_start_year: int = 1940
    dob_end_year: int = 2005
    max_insurers_per_patient: int = 4
    prescription_lookback_years: int = 3

    # Appointments
    primary_physician_probability: float = 0.7
    recency_exponent: float = 2.2
    penalty_year: int = 1980
    penalty_accept_probability: float = 0.2
    penalty_max_attempts: int = 5

    # Billing
    base_fee: int = 1500
    variance_ceiling: int = 1500
    specialization_multipliers: dict[str, float] = field(default_factory=default_multipliers)
    default_multiplier: float = 1.0
    insurance_probability: float = 0.85
    coverage_min: float = 0.50
    coverage_max: float = 0.95
    status_weights: dict[str, float] = field(default_factory=default_status_weights)
    payment_lookback_days: int = 60
    pending_update_max_days: int = 365 * 3
    pending_update_exponent: float = 0.4

    # Optional LLM text source
    use_llm: bool = False
    ollama_url: Optional[str] = None
    ollama_model: Optional[str] = None

    def multiplier_for(self, specialization: str) -> float:
        return self.specialization_multipliers.get(specialization, self.default_multiplier)

    def validate(self) -> "SeedConfig":
        """Raise ConfigError on values the generator can't honor."""
        if self.patient_count < 0 or self.physician_count < 0:
            raise ConfigError("patient_count and physician_count must be >= 0")
        if self.max_prescriptions_per_patient < 1 or self.max_appointments_per_patient < 1:
            raise ConfigError("per-patient maxima must be >= 1")
        if self.dob_end_year < self.dob_start_year:
            raise ConfigError("dob_end_year must not precede dob_start_year")
        if self.max_insurers_per_patient < 1:
            raise ConfigError("max_insurers_per_patient must be >= 1")
        for name in (
            "primary_physician_probability",
            "penalty_accept_probability",
            "insurance_probability",
            "coverage_min",
            "coverage_max",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be within [0, 1], got {value}")
        if self.coverage_max < self.coverage_min:
            raise ConfigError("coverage_max must not be below coverage_min")
        if not 0.0 < self.pending_update_exponent < 1.0:
            raise ConfigError("pending_update_exponent must be within (0, 1)")
        if any(m <= 0 for m in self.specialization_multipliers.values()) or self.default_multiplier <= 0:
            raise ConfigError("specialization multipliers must be positive")
        unknown = set(self.status_weights) - {s.value for s in BillingStatus}
        if unknown:
            raise ConfigError(f"unknown billing statuses in status_weights: {sorted(unknown)}")
        if not self.status_weights or any(w < 0 for w in self.status_weights.values()):
            raise ConfigError("status_weights must be non-empty and non-negative")
        if self.base_fee < 0 or self.variance_ceiling < 0:
            raise ConfigError("base_fee and variance_ceiling must be >= 0")
        return self

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_config(config_path: Optional[str] = None, **overrides) -> SeedConfig:
    """Build a SeedConfig from defaults, an optional YAML file, env vars, then overrides.

    Args:
        config_path: YAML file whose keys match SeedConfig fields
        **overrides: Field values that win over the file (None values are ignored)

    Returns:
        Validated SeedConfig
    """
    values: dict[str, Any] = {}

    if config_path:
        try:
            with open(config_path) as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not read config file {config_path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        values.update(loaded)

    env_medications = os.environ.get("CLINICSEED_MEDICATIONS")
    if env_medications:
        values["medications_path"] = env_medications

    values.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(SeedConfig)}
    unknown = set(values) - known
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    if "medications_path" in values:
        values["medications_path"] = str(Path(values["medications_path"]))

    return SeedConfig(**values).validate()
