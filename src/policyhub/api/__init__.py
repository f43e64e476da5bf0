"""HTTP API for PolicyHub."""

from policyhub.api.app import create_app

__all__ = ["create_app"]
