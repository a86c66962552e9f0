"""Raw material costing engine."""

__version__ = "1.0.0"
