"""Tests for configuration loading."""

import os
import tempfile
from pathlib import Path

import pytest

from wikirefs.config import ConfigError, load_config
from wikirefs.refs.generator import EmptyPolicy


def test_load_config_defaults():
    """Test loading config with defaults when no file exists."""
    with tempfile.TemporaryDirectory() as tmpdir:
        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            config = load_config()
        finally:
            os.chdir(orig_cwd)

    # Should use defaults
    assert config.vault.root == Path("./vault")
    assert config.format.eol == "auto"
    assert config.format.tab_size == 2
    assert config.format.insert_spaces is True
    assert config.refs.on_empty is EmptyPolicy.KEEP_MARKERS
    assert config.watch.debounce_ms == 150


def test_load_config_from_file():
    """Test loading config from a file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "wikirefs.toml"
        config_path.write_text("""
[vault]
root = "my-vault"

[format]
eol = "CRLF"
tab_size = 4
insert_spaces = false

[refs]
on_empty = "remove"

[watch]
debounce_ms = 500
""")

        config = load_config(config_path=config_path)

        assert config.vault.root == Path("my-vault")
        assert config.format.eol == "crlf"
        assert config.format.tab_size == 4
        assert config.format.insert_spaces is False
        assert config.refs.on_empty is EmptyPolicy.REMOVE
        assert config.watch.debounce_ms == 500


def test_load_config_search_cwd():
    """Test config search in current working directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            config_path = Path(tmpdir) / "wikirefs.toml"
            config_path.write_text("""
[refs]
on_empty = "leave"
""")

            config = load_config()
            assert config.refs.on_empty is EmptyPolicy.LEAVE
        finally:
            os.chdir(orig_cwd)


def test_load_config_search_vault():
    """Test config search in vault directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_path = Path(tmpdir) / "vault"
        vault_path.mkdir()
        config_path = vault_path / "wikirefs.toml"
        config_path.write_text("""
[format]
eol = "lf"
""")

        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            config = load_config(vault_path=vault_path)
        finally:
            os.chdir(orig_cwd)

        assert config.format.eol == "lf"
        assert config.vault.root == vault_path


@pytest.mark.parametrize(
    "body",
    [
        '[format]\neol = "cr"\n',
        "[format]\ntab_size = 0\n",
        '[format]\ntab_size = "two"\n',
        '[refs]\non_empty = "delete"\n',
    ],
)
def test_invalid_values(body):
    """Test out-of-range settings are rejected."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "wikirefs.toml"
        config_path.write_text(body)

        with pytest.raises(ConfigError):
            load_config(config_path=config_path)
