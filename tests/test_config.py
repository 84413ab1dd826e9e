"""Tests for YAML configuration loading."""

import logging

from storcli_health.config import ConfigManager
from storcli_health.models import DEFAULT_UTILITY_SEARCH_ORDER, HealthCheckConfig


def test_missing_file_uses_defaults(tmp_path):
    config = ConfigManager(str(tmp_path / "absent.conf")).config

    assert config.utility_search_order == DEFAULT_UTILITY_SEARCH_ORDER
    assert config.media_error_threshold == 10
    assert config.predictive_failure_threshold == 0
    assert not config.debug_output


def test_values_loaded(tmp_path):
    config_file = tmp_path / "storcli_health.conf"
    config_file.write_text(
        "debug_output: true\n"
        "utility_search_order:\n"
        "  - perccli64\n"
        "search_paths:\n"
        "  - /usr/local/sbin\n"
        "command_timeout: 15\n"
        "thresholds:\n"
        "  media_errors: 3\n"
    )

    config = ConfigManager(str(config_file)).config

    assert config.debug_output
    assert config.utility_search_order == ["perccli64"]
    assert config.search_paths == ["/usr/local/sbin"]
    assert config.command_timeout == 15
    assert config.media_error_threshold == 3
    assert config.predictive_failure_threshold == 0


def test_malformed_yaml_logs_error(tmp_path, caplog):
    config_file = tmp_path / "broken.conf"
    config_file.write_text("thresholds: [unclosed\n")

    with caplog.at_level(logging.ERROR):
        config = ConfigManager(str(config_file)).config

    assert "Error parsing YAML" in caplog.text
    assert config.to_dict() == HealthCheckConfig().to_dict()


def test_invalid_threshold_logs_error(tmp_path, caplog):
    config_file = tmp_path / "bad.conf"
    config_file.write_text("thresholds:\n  media_errors: lots\n")

    with caplog.at_level(logging.ERROR):
        config = ConfigManager(str(config_file)).config

    assert "Invalid value" in caplog.text
    assert config.media_error_threshold == 10


def test_non_mapping_file(tmp_path, caplog):
    config_file = tmp_path / "list.conf"
    config_file.write_text("- storcli64\n")

    with caplog.at_level(logging.ERROR):
        ConfigManager(str(config_file))

    assert "must contain a mapping" in caplog.text


def test_single_utility_and_path_as_scalars(tmp_path):
    config_file = tmp_path / "scalar.conf"
    config_file.write_text(
        "utility_search_order: storcli64\n"
        "search_paths: /usr/local/sbin\n"
    )

    config = ConfigManager(str(config_file)).config

    assert config.utility_search_order == ["storcli64"]
    assert config.search_paths == ["/usr/local/sbin"]


def test_mapping_search_order_logs_error(tmp_path, caplog):
    config_file = tmp_path / "mapping.conf"
    config_file.write_text("utility_search_order:\n  first: storcli64\n")

    with caplog.at_level(logging.ERROR):
        config = ConfigManager(str(config_file)).config

    assert "Invalid value" in caplog.text
    assert config.utility_search_order == DEFAULT_UTILITY_SEARCH_ORDER
