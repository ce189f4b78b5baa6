from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from src.models.config_models import DEFAULT_DROPPED_COLUMN_INDICES, ExportConfig, IngestConfig

"""Config loader.

Responsibilities:
- Load the YAML config (config/ingest.yml by default)
- Validate it against config_schema.json (shipped next to this module)
- Apply defaults for every missing key
"""

DEFAULT_CONFIG_PATH = Path("config/ingest.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config
            data fails schema validation (unknown keys, wrong types).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def build_config(data: dict[str, Any]) -> IngestConfig:
    """Validate raw config data and convert it to an IngestConfig."""
    _validate_config_schema(data)
    defaults = IngestConfig()
    export_raw = data.get("export") or {}
    dropped = export_raw.get("dropped_column_indices")
    return IngestConfig(
        metadata_store_path=data.get("metadata_store_path", defaults.metadata_store_path),
        error_log_directory=data.get("error_log_directory", defaults.error_log_directory),
        encoding=data.get("encoding", defaults.encoding),
        delimiter=data.get("delimiter", defaults.delimiter),
        unknown_uploader=data.get("unknown_uploader", defaults.unknown_uploader),
        detect_schema_mismatch=data.get("detect_schema_mismatch", defaults.detect_schema_mismatch),
        export=ExportConfig(
            dropped_column_indices=(
                frozenset(dropped) if dropped is not None else DEFAULT_DROPPED_COLUMN_INDICES
            ),
        ),
    )


def load_config(path: Path) -> IngestConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return build_config(data)
