"""
Configuration loading: YAML defaults overlaid with .env / environment values.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from hmac_timing.core.exceptions import ConfigurationError


DEFAULT_CONFIG_PATH = "config/config.yaml"

DEFAULTS: Dict[str, Any] = {
    'target': {
        'secret': 'my-super-secret-key-123',
        'message': 'This is a test file for the timing attack.',
        'algorithm': 'sha1',
    },
    'attack': {
        'delay_per_byte_ms': 25.0,
        'samples_per_byte': 5,
        'thresholds': {
            'min_time_difference_ms': 1.0,
            'min_separation': 3.0,
        },
    },
    'logging': {
        'level': 'INFO',
        'file': None,
        'console': True,
    },
}

# environment variable -> (section, key, converter)
ENV_OVERRIDES = {
    'HMAC_SECRET': ('target', 'secret', str),
    'HMAC_MESSAGE': ('target', 'message', str),
    'HMAC_ALGORITHM': ('target', 'algorithm', str),
    'DELAY_PER_BYTE_MS': ('attack', 'delay_per_byte_ms', float),
    'SAMPLES_PER_BYTE': ('attack', 'samples_per_byte', int),
    'LOG_LEVEL': ('logging', 'level', str),
    'LOG_FILE': ('logging', 'file', str),
}


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(config_path: Optional[str] = DEFAULT_CONFIG_PATH, use_env: bool = True) -> dict:
    """
    Build the runtime configuration.

    Order of precedence (lowest first): built-in defaults, the YAML file,
    environment variables (after loading ``.env``).

    Args:
        config_path: YAML file to read; ``None`` skips the file
        use_env: Whether to apply environment overrides

    Returns:
        Nested configuration dictionary

    Raises:
        ConfigurationError: If the file is missing or invalid, or a value
            is out of range
    """
    config = copy.deepcopy(DEFAULTS)

    if config_path is not None:
        path = Path(config_path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise ConfigurationError(f"Config file not found: {config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML config: {str(e)}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config root must be a mapping: {config_path}")
        _merge(config, data)

    if use_env:
        load_dotenv(find_dotenv(usecwd=True))
        for env_key, (section, key, convert) in ENV_OVERRIDES.items():
            raw = os.environ.get(env_key)
            if raw is None or raw == '':
                continue
            try:
                config[section][key] = convert(raw)
            except ValueError:
                raise ConfigurationError(f"Invalid value for {env_key}: {raw!r}")

    validate_config(config)
    return config


def validate_config(config: dict) -> None:
    """Reject tuning values the attack cannot run with."""
    attack = config['attack']

    try:
        delay = float(attack['delay_per_byte_ms'])
        samples = int(attack['samples_per_byte'])
    except (TypeError, ValueError):
        raise ConfigurationError("delay_per_byte_ms and samples_per_byte must be numbers")

    if delay <= 0:
        raise ConfigurationError(f"delay_per_byte_ms must be positive, got {delay}")
    if samples < 1:
        raise ConfigurationError(f"samples_per_byte must be at least 1, got {samples}")

    attack['delay_per_byte_ms'] = delay
    attack['samples_per_byte'] = samples

    for key in ('secret', 'message'):
        if not isinstance(config['target'][key], str):
            raise ConfigurationError(f"target.{key} must be a string")
