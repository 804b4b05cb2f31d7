import json

import pytest
from pydantic import ValidationError

from core.config import MIB, Config, load_config


def test_defaults():
    config = Config()

    assert config.proxy.prefix == "/corsproxy/"
    assert config.limits.max_request_bytes == MIB
    assert config.limits.max_response_bytes == 10 * MIB
    assert config.limits.upstream_timeout == 10.0
    assert "https://httpbin.org" in config.targets.allowed_targets
    assert config.targets.user_agent == "CorsGateway/1.0"


def test_config_is_immutable():
    config = Config()

    with pytest.raises(ValidationError):
        config.limits.max_request_bytes = 0
    assert isinstance(config.cors.allowed_origins, tuple)


def test_allow_list_entries_are_normalized():
    config = Config.model_validate(
        {
            "cors": {"allowed_origins": ["https://app.example.com/"]},
            "targets": {"allowed_targets": [" https://api.example.com/ "]},
        }
    )

    assert config.cors.allowed_origins == ("https://app.example.com",)
    assert config.targets.allowed_targets == ("https://api.example.com",)


@pytest.mark.parametrize("entry", ["api.example.com", "ftp://files.example.com", "https://"])
def test_invalid_allow_list_entry_is_rejected(entry):
    with pytest.raises(ValidationError):
        Config.model_validate({"targets": {"allowed_targets": [entry]}})


def test_options_is_not_a_forwarded_method():
    config = Config.model_validate({"cors": {"allowed_methods": ["get", "options"]}})

    assert config.cors.allowed_methods == ("GET",)


def test_load_creates_default(tmp_path):
    path = tmp_path / "cfg" / "config.json"

    config = load_config(path)

    assert config == Config()
    assert json.loads(path.read_text())["proxy"]["port"] == 8787


def test_load_reads_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"proxy": {"port": 9000}, "limits": {"upstream_timeout": 2.5}}))

    config = load_config(path)

    assert config.proxy.port == 9000
    assert config.limits.upstream_timeout == 2.5


def test_load_replaces_corrupt_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    resets = []

    config = load_config(path, on_reset=lambda backup, reason: resets.append((backup, reason)))

    assert config == Config()
    assert (tmp_path / "config.json.bak").read_text() == "{not json"
    assert resets == [(tmp_path / "config.json.bak", "JSONDecodeError")]


def test_load_replaces_invalid_allow_list(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"targets": {"allowed_targets": ["not-a-url"]}}))
    resets = []

    config = load_config(path, on_reset=lambda backup, reason: resets.append(reason))

    assert config == Config()
    assert resets == ["ValidationError"]
