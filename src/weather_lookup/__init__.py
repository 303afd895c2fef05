"""Weather lookup: city weather proxy and client query layer."""

__version__ = "1.0.0"
