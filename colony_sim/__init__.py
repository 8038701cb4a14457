"""Grid-based robot colony simulation: exploration, discovery and resource logistics."""

__version__ = "0.1.0"
