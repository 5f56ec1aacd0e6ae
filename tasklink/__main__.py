"""
Main entry point for the tasklink CLI.
"""

from tasklink.cli import cli


def main() -> None:
    """Main function for the tasklink CLI."""
    cli()


if __name__ == "__main__":
    main()
