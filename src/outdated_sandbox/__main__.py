"""Module entrypoint for ``python -m outdated_sandbox``."""

from outdated_sandbox.ui.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
