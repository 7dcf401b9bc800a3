import sys

from rich.console import Console

from mediabill.cli.app import load_plan, main_menu
from mediabill.logging import configure_logging


def main() -> None:
    configure_logging()
    if len(sys.argv) < 2:
        Console(stderr=True).print("[red]Usage: python -m mediabill PLAN.json[/red]")
        sys.exit(2)
    main_menu(load_plan(sys.argv[1]))


if __name__ == "__main__":
    main()
