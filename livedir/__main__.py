"""Module entrypoint for ``python -m livedir``.

All argument parsing and runtime setup happen in ``livedir.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
