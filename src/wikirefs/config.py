"""Configuration loader for wikirefs.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .errors import WikirefsError
from .refs.generator import EmptyPolicy

CONFIG_FILENAME = "wikirefs.toml"
EOL_CHOICES = ("auto", "lf", "crlf")


class ConfigError(WikirefsError):
    """Invalid value in wikirefs.toml."""


@dataclass
class VaultConfig:
    """Vault-specific configuration."""
    root: Path


@dataclass
class FormatConfig:
    """How new text is laid out in documents."""
    eol: str = "auto"
    tab_size: int = 2
    insert_spaces: bool = True


@dataclass
class RefsConfig:
    """Reference block behaviour."""
    on_empty: EmptyPolicy = EmptyPolicy.KEEP_MARKERS


@dataclass
class WatchConfig:
    """Watch mode configuration."""
    debounce_ms: int = 150


@dataclass
class WikirefsConfig:
    """Complete wikirefs configuration."""
    vault: VaultConfig
    format: FormatConfig = field(default_factory=FormatConfig)
    refs: RefsConfig = field(default_factory=RefsConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)


def load_config(config_path: Path | None = None, vault_path: Path | None = None) -> WikirefsConfig:
    """
    Load configuration from wikirefs.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/wikirefs.toml
    3. vault_path/wikirefs.toml

    Args:
        config_path: Explicit path to config file
        vault_path: Vault root path for fallback search

    Returns:
        WikirefsConfig with resolved settings

    Raises:
        ConfigError: If a value is out of range
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_FILENAME)
    if vault_path:
        search_paths.append(vault_path / CONFIG_FILENAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    vault_data = toml_data.get("vault", {})
    vault_config = VaultConfig(
        root=Path(vault_data.get("root", vault_path or Path("./vault"))),
    )

    format_data = toml_data.get("format", {})
    eol = str(format_data.get("eol", "auto")).lower()
    if eol not in EOL_CHOICES:
        raise ConfigError(f"format.eol must be one of {', '.join(EOL_CHOICES)}, got {eol!r}")
    tab_size = format_data.get("tab_size", 2)
    if not isinstance(tab_size, int) or tab_size < 1:
        raise ConfigError(f"format.tab_size must be a positive integer, got {tab_size!r}")
    format_config = FormatConfig(
        eol=eol,
        tab_size=tab_size,
        insert_spaces=bool(format_data.get("insert_spaces", True)),
    )

    refs_data = toml_data.get("refs", {})
    on_empty = refs_data.get("on_empty", EmptyPolicy.KEEP_MARKERS.value)
    try:
        refs_config = RefsConfig(on_empty=EmptyPolicy(on_empty))
    except ValueError:
        choices = ", ".join(p.value for p in EmptyPolicy)
        raise ConfigError(f"refs.on_empty must be one of {choices}, got {on_empty!r}") from None

    watch_data = toml_data.get("watch", {})
    watch_config = WatchConfig(
        debounce_ms=int(watch_data.get("debounce_ms", 150)),
    )

    return WikirefsConfig(
        vault=vault_config,
        format=format_config,
        refs=refs_config,
        watch=watch_config,
    )
