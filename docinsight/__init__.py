"""DocInsight: PDF summarization and strategy comparison service."""

__version__ = "0.1.0"
