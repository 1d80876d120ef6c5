"""brewplan — build-plan compiler for package descriptors."""

__version__ = "0.1.0"
