"""Module entry point for `python -m mod_config_analyzer`."""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
