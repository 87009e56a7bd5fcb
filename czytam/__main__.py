"""Package entry point for ``python -m czytam``.

WHY: Users run the trainer tools as ``python -m czytam tokenize ...`` or
``python -m czytam practice ...`` without installing console scripts.

HOW: Delegates to the CLI's main() function.
"""

from czytam.cli import main

if __name__ == "__main__":
    main()
