"""langbly-sync: incremental translation of locale files and Markdown documents."""

__version__ = "1.0.0"
