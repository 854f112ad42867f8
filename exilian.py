# exilian.py
"""
exilian - poe.ninja price lookup.

Entry point for running from a checkout: ``python exilian.py prices -s divine``.
"""
from __future__ import annotations

from core.cli import cli_main


def main() -> None:
    cli_main()


if __name__ == "__main__":
    main()
