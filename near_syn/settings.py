"""
Configuration for near-syn.

Settings are plain dataclass fields with defaults matching near-sdk's
attribute names. A JSON file passed with --config may override any of them.
"""

import json
from dataclasses import dataclass, field, fields
from typing import List

from .errors import NearSynError
from .type_system.mappings import NEAR_PRELUDE_TYPES


@dataclass
class Settings:
    """Attribute names and output options used across the pipeline."""

    # Attribute names
    bindgen_attr: str = 'near_bindgen'
    init_attr: str = 'init'
    payable_attr: str = 'payable'
    private_attr: str = 'private'
    serialize_derive: str = 'Serialize'

    # Output
    prelude_types: List[str] = field(default_factory=lambda: list(NEAR_PRELUDE_TYPES))
    contract_name: str = 'Contract'  # used when no contract type can be named
    indent: str = '    '


def load_settings(path: str) -> Settings:
    """
    Load settings from a JSON object file.

    Args:
        path: Path to the JSON configuration file

    Returns:
        A Settings instance with the file's keys applied over the defaults

    Raises:
        NearSynError: if the file cannot be read, is not valid JSON, has an
            unknown key, or a value of the wrong type
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            config = json.load(f)
    except OSError as e:
        raise NearSynError(path, f'cannot read configuration: {e.strerror or e}') from e
    except json.JSONDecodeError as e:
        raise NearSynError(path, f'invalid JSON: {e}') from e

    if not isinstance(config, dict):
        raise NearSynError(path, 'configuration must be a JSON object')

    settings = Settings()
    known = {f.name: f for f in fields(Settings)}
    for key, value in config.items():
        if key not in known:
            raise NearSynError(path, f'unknown configuration key "{key}"')
        default = getattr(settings, key)
        if isinstance(default, list):
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise NearSynError(path, f'"{key}" must be a list of strings')
        elif not isinstance(value, str):
            raise NearSynError(path, f'"{key}" must be a string')
        setattr(settings, key, value)

    return settings
