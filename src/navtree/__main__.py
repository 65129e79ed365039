"""Entry point: load a navtree config file and print the effective settings."""

import sys
from pathlib import Path

from .config import NavConfig, get_config_path


def main(argv: list[str] | None = None) -> int:
    """Check a config file. Defaults to ~/.config/navtree/config.toml."""
    args = sys.argv[1:] if argv is None else argv
    path = Path(args[0]).expanduser() if args else get_config_path()

    try:
        config = NavConfig.load(path)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    source = path if path.exists() else "defaults"
    print(f"# {source}")
    print(f"create_on_register = {str(config.create_on_register).lower()}")
    print(f"bind_to_host = {str(config.bind_to_host).lower()}")
    print(f"max_redirects = {config.max_redirects}")
    print(f'host_file = "{config.host_file}"')
    return 0


if __name__ == "__main__":
    sys.exit(main())
