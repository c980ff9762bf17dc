"""Localization Manager — language folder sync, stats and auto-translation.

Launch with: python main.py <command> [options]
"""

from localizer.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
