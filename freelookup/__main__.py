"""Main entry point when executing freelookup as a package.

This allows running the package using python -m freelookup.
"""

from freelookup.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
