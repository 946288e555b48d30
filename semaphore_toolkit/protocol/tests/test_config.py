"""
Unit tests for deployment configuration.
"""

import pytest

from semaphore_toolkit.protocol import config
from semaphore_toolkit.protocol.config import DeploymentConfig, resolve_root_history_size
from semaphore_toolkit.protocol.exceptions import ConfigurationError


class TestConfigParameters:
    def test_field_width(self):
        assert config.FIELD_BITS == 256
        assert config.FIELD_MAX == 2**256 - 1

    def test_default_root_history(self):
        assert config.DEFAULT_ROOT_HISTORY_SIZE == 100

    def test_validate_config(self):
        assert config.validate_config() is True


class TestRootHistorySize:
    @pytest.mark.parametrize("value", [None, 0])
    def test_zero_means_default(self, value):
        assert resolve_root_history_size(value) == 100

    def test_explicit_value(self):
        assert resolve_root_history_size(7) == 7

    def test_negative_rejected(self):
        with pytest.raises(ConfigurationError):
            resolve_root_history_size(-1)

    def test_non_int_rejected(self):
        with pytest.raises(ConfigurationError):
            resolve_root_history_size("10")


class TestDeploymentConfig:
    def test_defaults(self):
        cfg = DeploymentConfig()
        assert cfg.root_history_size == 100
        assert cfg.encoder_strategies == ("native", "external", "manual")
        assert cfg.garaga_command == ("garaga",)

    def test_zero_capacity_normalized(self):
        assert DeploymentConfig(root_history_size=0).root_history_size == 100

    def test_invalid_timeout(self):
        with pytest.raises(ConfigurationError):
            DeploymentConfig(encoder_timeout=0)

    def test_invalid_depth(self):
        with pytest.raises(ConfigurationError):
            DeploymentConfig(tree_depth=33)

    def test_from_mapping_rejects_unknown_keys(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
            DeploymentConfig.from_mapping({"root_history": 5})

    def test_from_mapping_splits_strings(self):
        cfg = DeploymentConfig.from_mapping(
            {
                "encoder_strategies": "external, manual",
                "garaga_command": "micromamba run -n garaga garaga",
            }
        )
        assert cfg.encoder_strategies == ("external", "manual")
        assert cfg.garaga_command == ("micromamba", "run", "-n", "garaga", "garaga")

    def test_from_env(self):
        cfg = DeploymentConfig.from_env(
            {
                "SEMAPHORE_ROOT_HISTORY_SIZE": "30",
                "SEMAPHORE_ENCODER_TIMEOUT": "5.5",
                "SEMAPHORE_TREE_DEPTH": "16",
                "SEMAPHORE_ENCODER_STRATEGIES": "manual",
            }
        )
        assert cfg.root_history_size == 30
        assert cfg.encoder_timeout == 5.5
        assert cfg.tree_depth == 16
        assert cfg.encoder_strategies == ("manual",)

    def test_from_env_empty(self):
        assert DeploymentConfig.from_env({}) == DeploymentConfig()

    def test_from_env_invalid_int(self):
        with pytest.raises(ConfigurationError, match="ROOT_HISTORY_SIZE"):
            DeploymentConfig.from_env({"SEMAPHORE_ROOT_HISTORY_SIZE": "lots"})

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "deployment.yaml"
        path.write_text(
            "root_history_size: 8\nencoder_timeout: 30\ncurve: bn254\n",
            encoding="utf-8",
        )
        cfg = DeploymentConfig.from_yaml(path)
        assert cfg.root_history_size == 8
        assert cfg.encoder_timeout == 30

    def test_from_yaml_requires_mapping(self, tmp_path):
        path = tmp_path / "deployment.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            DeploymentConfig.from_yaml(path)
