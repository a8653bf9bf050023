"""gitrieve: mirror remote repositories into storage backends."""

__version__ = "0.1.0"
