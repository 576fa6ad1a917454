"""cliprelay — relay a local editor to a clipboard-driven chat agent."""

__version__ = "0.1.0"
