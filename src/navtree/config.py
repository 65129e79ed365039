"""Configuration loading and defaults for navtree."""

import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .errors import ConfigError


def _toml_string(value: str) -> str:
    """Quote a string as a TOML basic string."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace("\"", "\\\"")
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def get_config_dir() -> Path:
    """Get the navtree config directory (XDG-style)."""
    return Path.home() / ".config" / "navtree"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_config_dir() / "config.toml"


@dataclass
class NavConfig:
    """Navigation controller options."""

    create_on_register: bool = False
    bind_to_host: bool = False
    max_redirects: int = 16
    host_file: str = ""  # empty = in-memory host

    def get_host_path(self) -> Path | None:
        """Get the host token file, or None for an in-memory host."""
        if not self.host_file:
            return None
        return Path(self.host_file).expanduser()

    def for_branch(self) -> "NavConfig":
        """Copy of this config for a branched controller (never host-bound)."""
        return replace(self, bind_to_host=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NavConfig":
        """Build a config from a mapping, using defaults for missing keys."""
        defaults = cls()
        values = {
            "create_on_register": data.get("create_on_register", defaults.create_on_register),
            "bind_to_host": data.get("bind_to_host", defaults.bind_to_host),
            "host_file": data.get("host_file", defaults.host_file),
        }
        for key in ("create_on_register", "bind_to_host"):
            if not isinstance(values[key], bool):
                raise ConfigError(f"{key} must be true or false, got {values[key]!r}")
        if not isinstance(values["host_file"], str):
            raise ConfigError(f"host_file must be a string, got {values['host_file']!r}")

        max_redirects = data.get("max_redirects", defaults.max_redirects)
        if isinstance(max_redirects, bool) or not isinstance(max_redirects, int):
            raise ConfigError(f"max_redirects must be an integer, got {max_redirects!r}")
        if max_redirects < 0:
            raise ConfigError(f"max_redirects must be >= 0, got {max_redirects}")

        return cls(max_redirects=max_redirects, **values)

    @classmethod
    def load(cls, path: Path | None = None) -> "NavConfig":
        """Load configuration from file, or defaults if the file is missing."""
        config_path = path if path is not None else get_config_path()

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e

        # Accept both a bare file and one with a [navtree] table
        if isinstance(data.get("navtree"), dict):
            data = data["navtree"]

        return cls.from_dict(data)

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file."""
        config_path = path if path is not None else get_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        # Build TOML content manually (tomllib is read-only)
        lines = [
            '# navtree configuration',
            '',
            '# Run each item\'s create() as soon as it is registered',
            f'create_on_register = {str(self.create_on_register).lower()}',
            '',
            '# Mirror the root history into a host position token',
            f'bind_to_host = {str(self.bind_to_host).lower()}',
            '',
            '# Maximum number of chained beforeopen redirects',
            f'max_redirects = {self.max_redirects}',
            '',
            '# Token file for the host; empty = in-memory host',
            f'host_file = {_toml_string(self.host_file)}',
        ]

        config_path.write_text("\n".join(lines) + "\n")
