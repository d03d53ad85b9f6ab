"""Repository analysis and documentation drafting for registered Git repositories."""

__version__ = "0.1.0"
