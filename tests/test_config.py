"""
Tests for configuration loading and logging setup.

Run with: pytest tests/test_config.py -v
"""

import logging

import pytest

from hmac_timing.core.exceptions import ConfigurationError
from hmac_timing.utils.config import ENV_OVERRIDES, load_config
from hmac_timing.utils.logger import Logger


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ENV_OVERRIDES:
        monkeypatch.delenv(key, raising=False)
    # keep load_dotenv from picking up a developer's .env
    monkeypatch.chdir(tmp_path)


def write_yaml(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestLoadConfig:
    """Test suite for YAML + environment configuration."""

    def test_defaults_without_file(self):
        config = load_config(None, use_env=False)

        assert config['target']['secret'] == 'my-super-secret-key-123'
        assert config['target']['message'] == 'This is a test file for the timing attack.'
        assert config['attack']['delay_per_byte_ms'] == 25.0
        assert config['attack']['samples_per_byte'] == 5

    def test_yaml_overrides_defaults(self, tmp_path):
        path = write_yaml(tmp_path, "attack:\n  samples_per_byte: 9\n")

        config = load_config(path, use_env=False)

        assert config['attack']['samples_per_byte'] == 9
        assert config['attack']['delay_per_byte_ms'] == 25.0
        assert config['attack']['thresholds']['min_separation'] == 3.0

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = write_yaml(tmp_path, "target:\n  secret: from-yaml\n")
        monkeypatch.setenv('HMAC_SECRET', 'from-env')
        monkeypatch.setenv('DELAY_PER_BYTE_MS', '7.5')

        config = load_config(path)

        assert config['target']['secret'] == 'from-env'
        assert config['attack']['delay_per_byte_ms'] == 7.5

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = write_yaml(tmp_path, "attack: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_config(path, use_env=False)

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv('SAMPLES_PER_BYTE', 'many')

        with pytest.raises(ConfigurationError):
            load_config(None)

    @pytest.mark.parametrize("yaml_text", [
        "attack:\n  delay_per_byte_ms: 0\n",
        "attack:\n  delay_per_byte_ms: -3\n",
        "attack:\n  samples_per_byte: 0\n",
        "target:\n  secret: 123\n",
    ])
    def test_out_of_range_values(self, tmp_path, yaml_text):
        path = write_yaml(tmp_path, yaml_text)

        with pytest.raises(ConfigurationError):
            load_config(path, use_env=False)


class TestLogger:
    """Test logger wiring."""

    def test_file_logging(self, tmp_path):
        log_file = tmp_path / "logs" / "attack.log"
        logger = Logger(name="TimingAttack.filetest", log_file=str(log_file), console=False)

        logger.info("byte resolved")
        for handler in logger.logger.handlers:
            handler.flush()

        assert "byte resolved" in log_file.read_text(encoding="utf-8")

    def test_component_logger_defers_to_root(self):
        component = Logger.for_component("digest")

        assert component.logger.level == logging.NOTSET
        assert component.logger.handlers == []
        assert component.logger.name == "TimingAttack.digest"
