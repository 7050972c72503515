"""Main entry point for ``python -m distrobox``."""

from distrobox.cli.main import main


if __name__ == "__main__":
    main()
