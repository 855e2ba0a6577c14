"""Tests for config loading and session factory resolution."""

import json

import pytest

from stickerbot.config.loader import (
    camel_to_snake,
    convert_keys,
    convert_to_camel,
    get_config_path,
    get_data_dir,
    load_config,
    save_config,
    snake_to_camel,
)
from stickerbot.config.schema import Config
from stickerbot.session.resolve import SessionFactoryError, resolve_session_factory


class TestDefaults:
    def test_values(self):
        config = Config()
        assert config.sticker.marker == "#s"
        assert config.sticker.size == 512
        assert config.keywords.door == "porta"
        assert config.keywords.for_ == "para"
        assert config.keywords.ack_reply == "pego"
        assert not config.keywords.confirmation_reply_enabled
        assert config.timing.pending_timeout_s == 8.0
        assert config.timing.reconnect_delay_s == 5.0
        assert config.session.factory == ""

    def test_auth_path_expands_user(self):
        config = Config()
        config.session.auth_dir = "~/wa-auth"
        assert "~" not in str(config.auth_path)


class TestKeyConversion:
    @pytest.mark.parametrize("camel,snake", [
        ("ffmpegPath", "ffmpeg_path"),
        ("pendingTimeoutS", "pending_timeout_s"),
        ("marker", "marker"),
    ])
    def test_both_ways(self, camel, snake):
        assert camel_to_snake(camel) == snake
        assert snake_to_camel(snake) == camel

    def test_nested(self):
        data = {"timing": {"reconnectDelayS": 1}, "session": {"browser": ["a"]}}
        assert convert_keys(data) == {"timing": {"reconnect_delay_s": 1}, "session": {"browser": ["a"]}}
        assert convert_to_camel(convert_keys(data)) == data


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.json")
        assert config.sticker.marker == "#s"

    def test_camel_case_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "session": {"factory": "mypkg.wa:connect", "authDir": "/var/lib/bot"},
            "sticker": {"marker": "!fig", "ffmpegPath": "/opt/ffmpeg"},
            "keywords": {"for": "pra", "confirmationReplyEnabled": True},
            "timing": {"pendingTimeoutS": 3},
        }))

        config = load_config(path)

        assert config.session.factory == "mypkg.wa:connect"
        assert str(config.auth_path) == "/var/lib/bot"
        assert config.sticker.marker == "!fig"
        assert config.sticker.ffmpeg_path == "/opt/ffmpeg"
        assert config.keywords.for_ == "pra"
        assert config.keywords.confirmation_reply_enabled
        assert config.timing.pending_timeout_s == 3

    def test_malformed_json_gives_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{oops")
        assert load_config(path).sticker.marker == "#s"

    def test_invalid_value_gives_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"sticker": {"size": "huge"}}))
        assert load_config(path).sticker.size == 512

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STICKERBOT_SESSION__FACTORY", "envpkg:factory")
        monkeypatch.setenv("STICKERBOT_TIMING__RECONNECT_DELAY_S", "2.5")

        config = load_config(tmp_path / "nope.json")

        assert config.session.factory == "envpkg:factory"
        assert config.timing.reconnect_delay_s == 2.5

    def test_save_round_trip(self, tmp_path):
        path = tmp_path / "sub" / "config.json"
        config = Config()
        config.sticker.marker = "#fig"
        config.keywords.for_ = "pra"

        save_config(config, path)

        raw = json.loads(path.read_text())
        assert raw["sticker"]["marker"] == "#fig"
        assert raw["keywords"]["for"] == "pra"
        assert "pendingTimeoutS" in raw["timing"]
        assert load_config(path).keywords.for_ == "pra"


class TestResolveSessionFactory:
    def test_resolves_callable(self):
        factory = resolve_session_factory("json:loads")
        assert factory is json.loads

    def test_dotted_attribute(self):
        assert resolve_session_factory("json:JSONDecoder.decode") is json.JSONDecoder.decode

    @pytest.mark.parametrize("path", ["", "json", "json:", ":loads"])
    def test_bad_format(self, path):
        with pytest.raises(SessionFactoryError):
            resolve_session_factory(path)

    def test_missing_module(self):
        with pytest.raises(SessionFactoryError, match="Cannot import"):
            resolve_session_factory("no_such_module_xyz:connect")

    def test_missing_attribute(self):
        with pytest.raises(SessionFactoryError, match="no attribute"):
            resolve_session_factory("json:nope")

    def test_not_callable(self):
        with pytest.raises(SessionFactoryError, match="not callable"):
            resolve_session_factory("json:__name__")


class TestPaths:
    def test_data_dir_under_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))

        data_dir = get_data_dir()

        assert data_dir == tmp_path / ".stickerbot"
        assert data_dir.is_dir()
        assert get_config_path() == data_dir / "config.json"
