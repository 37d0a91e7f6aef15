"""marketsettle: On-demand settlement of binary strike-price markets."""

__version__ = "0.1.0"
__author__ = "marketsettle Team"

__all__ = ["__version__", "__author__"]
