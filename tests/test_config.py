"""Tests for startup configuration."""

import dataclasses

import pytest

from pf_exporter.config import ExporterConfig, parse_listen_address
from pf_exporter.errors import ConfigError


def test_default_listen_address_binds_everywhere():
    assert parse_listen_address(":9107") == ("", 9107)


def test_listen_address_with_host():
    assert parse_listen_address("127.0.0.1:9999") == ("127.0.0.1", 9999)
    assert parse_listen_address("[::1]:9107") == ("::1", 9107)
    assert parse_listen_address("[::]:9107") == ("::", 9107)


@pytest.mark.parametrize("address", ["9107", "host:port", ":70000"])
def test_bad_listen_address(address):
    with pytest.raises(ConfigError):
        parse_listen_address(address)


def test_defaults_are_valid():
    config = ExporterConfig().validate()
    assert config.metrics_path == "/metrics"
    assert config.device == "/dev/pf"
    assert config.fd is None
    assert config.bind == ("", 9107)


@pytest.mark.parametrize("overrides", [
    {"metrics_path": "metrics"},
    {"metrics_path": "/"},
    {"listen_address": "nope"},
])
def test_invalid_config(overrides):
    with pytest.raises(ConfigError):
        ExporterConfig(**overrides).validate()


@pytest.mark.parametrize("fd", [0, 3, -3])
def test_preopened_fd_is_refused(fd):
    with pytest.raises(ConfigError) as exc:
        ExporterConfig(fd=fd).validate()
    assert "--pf.fd" in str(exc.value)


def test_config_is_immutable():
    config = ExporterConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.metrics_path = "/other"
