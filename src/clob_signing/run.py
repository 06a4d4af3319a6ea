"""CLI entry point for the CLOB signing tools."""

from clob_signing.cli import app

__all__ = ["app", "main"]


def main() -> None:
    """Run the signing CLI application."""
    app()


if __name__ == "__main__":
    main()
