"""Module entrypoint for running fieldconf as ``python -m fieldconf``."""

from __future__ import annotations

from fieldconf.cli import main


if __name__ == "__main__":
    main()
