"""specmint - specialist template pipeline and version management."""

__version__ = "0.1.0"
