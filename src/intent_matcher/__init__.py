# ABOUTME: Main package initialization for the intent-matcher networking engine.
# ABOUTME: Exports version information from pyproject.toml.

from importlib.metadata import version

__version__ = version("intent-matcher")
