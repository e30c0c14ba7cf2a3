"""Config file discovery and loading.

Walk-up finder locates ffiwire.toml, similar to how git finds .git/.
Supports FFIWIRE_CONFIG env var and --config CLI flag overrides.

Sparse TOML contract: defaults baked into the models, ffiwire.toml only
contains overrides.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "ffiwire.toml"
CONFIG_ENV_VAR = "FFIWIRE_CONFIG"


class ConfigError(RuntimeError):
    """Raised when a config file cannot be read or is invalid."""


class PythonBindingsConfig(BaseModel):
    """[bindings.python] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    runtime_import: str = "ffiwire_runtime"


class SwiftBindingsConfig(BaseModel):
    """[bindings.swift] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    module_name: str | None = None


class BindingsConfig(BaseModel):
    """[bindings] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    python: PythonBindingsConfig = Field(default_factory=PythonBindingsConfig)
    swift: SwiftBindingsConfig = Field(default_factory=SwiftBindingsConfig)


class FfiwireConfig(BaseModel):
    """Top-level ffiwire.toml contents."""

    model_config = {"frozen": True, "extra": "forbid"}

    bindings: BindingsConfig = Field(default_factory=BindingsConfig)


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for ffiwire.toml.

    Returns the path to the config file, or None if not found.
    Checks FFIWIRE_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Path | None = None, cwd: Path | None = None) -> FfiwireConfig:
    """Load and validate config from a TOML file.

    If *path* is None, uses find_config(*cwd*) to discover the file.
    Returns default FfiwireConfig if no file is found.
    """
    if path is None:
        path = find_config(cwd)

    if path is None:
        return FfiwireConfig()

    try:
        data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        config = FfiwireConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid {path}: {e}") from e

    logger.debug("Loaded config from %s", path)
    return config
