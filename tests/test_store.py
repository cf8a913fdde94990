"""Tests for the persisted user configuration store."""

import os
import subprocess
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from evans.config import (
    ConfigDecodeError,
    ConfigStore,
    Header,
    StoreError,
    get_default_config,
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestConfigStore:
    """Tests for ConfigStore."""

    def test_creates_file_from_template(self, temp_dir):
        path = temp_dir / "evans" / "config.toml"
        template = get_default_config()
        template.server.port = "7777"

        store = ConfigStore(path, template)

        assert path.exists()
        config = store.get()
        assert config.server.port == "7777"
        assert config.request.header == [Header("grpc-client", "evans")]
        assert config.default.proto_file == [""]

    def test_existing_file_not_overwritten(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text('[server]\nhost = "saved"\n')

        ConfigStore(path, get_default_config())

        assert path.read_text() == '[server]\nhost = "saved"\n'

    def test_saved_values_win_and_template_fills_gaps(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text('[server]\nhost = "saved"\n\n[log]\nprefix = "> "\n')
        template = get_default_config()
        template.server.host = "template-host"
        template.server.tls = True

        config = ConfigStore(path, template).get()

        assert config.server.host == "saved"
        assert config.server.tls is True
        assert config.log.prefix == "> "
        assert config.input.prompt_format == "{ancestor}{name} ({type}) => "

    def test_get_rereads_file(self, temp_dir):
        path = temp_dir / "config.toml"
        store = ConfigStore(path, get_default_config())
        path.write_text('[repl]\ncoloredOutput = false\n')
        assert store.get().repl.colored_output is False

    def test_tilde_expanded(self, temp_dir):
        with patch.dict(os.environ, {"HOME": str(temp_dir)}):
            store = ConfigStore("~/.config/evans/config.toml", get_default_config())
        assert store.path == temp_dir / ".config" / "evans" / "config.toml"
        assert store.path.exists()

    def test_malformed_file(self, temp_dir):
        path = temp_dir / "config.toml"
        path.write_text("[server\n")
        with pytest.raises(ConfigDecodeError):
            ConfigStore(path, get_default_config()).get()

    def test_cannot_create(self, temp_dir):
        blocker = temp_dir / "file"
        blocker.write_text("")
        with pytest.raises(StoreError):
            ConfigStore(blocker / "config.toml", get_default_config())

    def test_failed_write_leaves_no_file(self, temp_dir):
        path = temp_dir / "evans" / "config.toml"
        with patch(
            "evans.config.store.tomli_w.dump",
            side_effect=OSError("No space left on device"),
        ):
            with pytest.raises(StoreError, match="No space left"):
                ConfigStore(path, get_default_config())

        assert not path.exists()
        assert list(path.parent.iterdir()) == []

        store = ConfigStore(path, get_default_config())
        assert store.get().server.port == "50051"

    def test_cannot_open(self, temp_dir):
        path = temp_dir / "config.toml"
        path.mkdir()
        with pytest.raises(StoreError):
            ConfigStore(path, get_default_config()).get()

    def test_edit_runs_editor(self, temp_dir):
        store = ConfigStore(temp_dir / "config.toml", get_default_config())
        with patch.dict(os.environ, {"EDITOR": "code --wait"}):
            with patch("evans.config.store.subprocess.run") as run:
                store.edit()
        run.assert_called_once_with(
            ["code", "--wait", str(store.path)], check=True
        )

    def test_edit_default_editor(self, temp_dir):
        store = ConfigStore(temp_dir / "config.toml", get_default_config())
        env = {k: v for k, v in os.environ.items() if k != "EDITOR"}
        with patch.dict(os.environ, env, clear=True):
            with patch("evans.config.store.subprocess.run") as run:
                store.edit()
        assert run.call_args.args[0] == ["vi", str(store.path)]

    def test_edit_failure(self, temp_dir):
        store = ConfigStore(temp_dir / "config.toml", get_default_config())
        with patch(
            "evans.config.store.subprocess.run",
            side_effect=subprocess.CalledProcessError(1, ["vi"]),
        ):
            with pytest.raises(StoreError):
                store.edit()
