"""Module entrypoint for ``python -m lazyhub``."""

from .cli import main


if __name__ == "__main__":
    main()
