"""Unit tests for config module."""

import os

from squasher.config import config_dir, load_config, parse_env_file


class TestParseEnvFile:
    """Test .env file parsing."""

    def test_simple_key_value(self, tmp_path):
        f = tmp_path / ".env"
        f.write_text("SQUASHER_PORT=4000\nSQUASHER_HOST=0.0.0.0\n")
        assert parse_env_file(f) == {"SQUASHER_PORT": "4000", "SQUASHER_HOST": "0.0.0.0"}

    def test_quoted_value_keeps_hash(self, tmp_path):
        f = tmp_path / ".env"
        f.write_text('KEY="value # not a comment"\n')
        assert parse_env_file(f) == {"KEY": "value # not a comment"}

    def test_export_prefix_and_comments(self, tmp_path):
        f = tmp_path / ".env"
        f.write_text("# comment\n\nexport KEY=val # trailing\n")
        assert parse_env_file(f) == {"KEY": "val"}

    def test_missing_file(self, tmp_path):
        assert parse_env_file(tmp_path / "nonexistent") == {}

    def test_no_equals(self, tmp_path):
        f = tmp_path / ".env"
        f.write_text("INVALID_LINE\n")
        assert parse_env_file(f) == {}


class TestLoadConfig:
    """Test load_config precedence."""

    def test_config_dir_respects_xdg(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert config_dir() == tmp_path / "squasher"

    def test_local_env_overrides_user_config(self, tmp_path, monkeypatch):
        config = tmp_path / "config" / "squasher"
        config.mkdir(parents=True)
        (config / "config.env").write_text("TEST_SQ_A=user\nTEST_SQ_B=user\n")
        (tmp_path / ".env").write_text("TEST_SQ_A=local\n")

        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("TEST_SQ_A", raising=False)
        monkeypatch.delenv("TEST_SQ_B", raising=False)

        load_config()

        assert os.environ["TEST_SQ_A"] == "local"
        assert os.environ["TEST_SQ_B"] == "user"
        monkeypatch.delenv("TEST_SQ_A")
        monkeypatch.delenv("TEST_SQ_B")

    def test_existing_env_wins(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("TEST_SQ_C=file\n")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "none"))
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("TEST_SQ_C", "shell")

        load_config()

        assert os.environ["TEST_SQ_C"] == "shell"
