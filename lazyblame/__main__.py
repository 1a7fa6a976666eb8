"""Module entrypoint for ``python -m lazyblame``."""

from .cli import main


if __name__ == "__main__":
    main()
