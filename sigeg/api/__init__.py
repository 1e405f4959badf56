"""REST API package."""

from sigeg.api.app import create_app

__all__ = ["create_app"]
