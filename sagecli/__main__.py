"""Main entry point when executing sagecli as a package.

This allows running the package using python -m sagecli.
"""

from sagecli.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
