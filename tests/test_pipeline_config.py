import pytest

from core.config import load_config, load_config_file
from core.exceptions import ConfigurationError


def test_defaults():
    config = load_config()

    assert config.host == "127.0.0.1"
    assert config.port == 8080
    assert config.path == "/beacon"
    assert config.forwarder == "console"
    assert config.separator == "\n"
    assert config.mapper_options() == {"svgSettings": None, "svgTemplate": None}


def test_load_from_yaml_with_overrides(tmp_path):
    path = tmp_path / "pipeline.yaml"
    path.write_text(
        "host: 0.0.0.0\n"
        "port: 9000\n"
        "path: /rt\n"
        "svgSettings: ./settings.json\n"
        "logLevel: debug\n",
        encoding="utf-8",
    )

    config = load_config_file(path, port=9100, host=None)

    assert config.host == "0.0.0.0"
    assert config.port == 9100
    assert config.path == "/rt"
    assert config.log_level == "DEBUG"
    assert config.mapper_options()["svgSettings"] == "./settings.json"


def test_empty_yaml_uses_defaults(tmp_path):
    path = tmp_path / "pipeline.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config_file(path).port == 8080


@pytest.mark.parametrize("values", [
    {"forwarder": "statsd"},
    {"port": 0},
    {"path": "beacon"},
    {"logLevel": "LOUD"},
    {"unexpected": True},
])
def test_invalid_values_rejected(values):
    with pytest.raises(ConfigurationError, match="Invalid pipeline configuration"):
        load_config(values)


def test_file_errors(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config_file(tmp_path / "missing.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("host: [unterminated", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Failed to parse YAML"):
        load_config_file(broken)

    listing = tmp_path / "list.yaml"
    listing.write_text("- host\n- port\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="must contain a mapping"):
        load_config_file(listing)
