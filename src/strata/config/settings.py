from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from strata.engine.error_policies import ErrorPolicy, PopOrder
from strata.exceptions import ConfigError

CONFIG_FILENAME = "strata.yaml"


class LifecycleErrorConfig(BaseModel):
    start: ErrorPolicy = ErrorPolicy.ISOLATE
    update: ErrorPolicy = ErrorPolicy.ISOLATE
    dispose: ErrorPolicy = ErrorPolicy.PROPAGATE


class StrataConfig(BaseModel):
    errors: LifecycleErrorConfig = Field(default_factory=LifecycleErrorConfig)
    pop_order: PopOrder = PopOrder.REMOVE_THEN_DISPOSE
    tick_interval_ms: int = Field(default=16, ge=1)
    config_dir: Path | None = None


def _find_config_file(start: Path | None = None) -> Path | None:
    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(start: Path | None = None) -> StrataConfig:
    config_path = _find_config_file(start)

    if config_path is not None:
        with open(config_path) as f:
            try:
                raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Could not parse {config_path}: {e}") from e
        try:
            config = StrataConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e
        config.config_dir = config_path.parent
    else:
        config = StrataConfig()

    policy_env = os.environ.get("STRATA_ON_LIFECYCLE_ERROR")
    if policy_env is not None:
        try:
            policy = ErrorPolicy(policy_env.strip().lower())
        except ValueError as e:
            raise ConfigError(f"STRATA_ON_LIFECYCLE_ERROR must be 'isolate' or 'propagate', got '{policy_env}'") from e
        config.errors.start = policy
        config.errors.update = policy

    interval_env = os.environ.get("STRATA_TICK_INTERVAL_MS")
    if interval_env is not None:
        try:
            interval = int(interval_env)
        except ValueError as e:
            raise ConfigError(f"STRATA_TICK_INTERVAL_MS must be an integer, got '{interval_env}'") from e
        if interval < 1:
            raise ConfigError(f"STRATA_TICK_INTERVAL_MS must be positive, got {interval}")
        config.tick_interval_ms = interval

    return config
