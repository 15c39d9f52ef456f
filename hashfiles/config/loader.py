"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from hashfiles.errors import ConfigError

from .models import HashfilesConfig


def load_config(cli_path: str | None = None) -> HashfilesConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    if cli_path and not Path(cli_path).exists():
        raise ConfigError(f"Config file not found: {cli_path}")

    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./hashfiles.yaml"),
        Path.home() / ".hashfiles" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return HashfilesConfig(**raw)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
            except (TypeError, ValidationError) as e:
                raise ConfigError(f"Invalid config in {path}: {e}") from e

    return HashfilesConfig()


_ENV_REF = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def _env_value(match: re.Match[str]) -> str:
    name, default = match.group(1), match.group(2)
    value = os.environ.get(name)
    if value:
        return value
    return default or ""


def _expand_env_vars(obj: object) -> object:
    """Expand ${VAR} and ${VAR:-default} in every string of a parsed YAML tree.

    Unset variables expand to the default, or to an empty string.
    """
    if isinstance(obj, str):
        return _ENV_REF.sub(_env_value, obj)
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


# Default YAML template for `hashfiles config init`
DEFAULT_CONFIG_TEMPLATE = """\
# hashfiles.yaml

hashing:
  algorithms: "md5"            # comma separated: md5, sha1, sha256, quickxorhash
  # parallel: 8                # defaults to the number of logical CPUs
  chunk_size: 1048576          # read size per file, in bytes
  strategy: "gate"             # gate | chunked
  error_policy: "abort"        # abort | collect
  ignore_patterns: []          # path components to skip, e.g. [".git"]
  include_sum_files: false     # hash existing <algo>sum.txt files in the root

verify:
  fail_on_mismatch: false      # exit 1 when any digest differs

verbose: false

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
