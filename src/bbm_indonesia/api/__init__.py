"""HTTP API for aggregated fuel prices and the region directory."""

from bbm_indonesia.api.app import create_app

__all__ = ["create_app"]
