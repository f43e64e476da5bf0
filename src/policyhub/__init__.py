"""PolicyHub: multi-tenant policy management backend."""

__version__ = "0.1.0"
