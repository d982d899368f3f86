"""bbm-indonesia: Indonesian retail fuel price aggregator."""

__version__ = "0.1.0"
