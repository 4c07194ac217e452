"""Cross-file usage reports for shared design symbols and styles."""

__version__ = "0.1.0"
