"""FastAPI route modules.

Exports all route modules for inclusion in the main application.
"""

from invoicehub.api.routes import accounts, deliveries, documents, fetch, providers, settings

__all__ = [
    "accounts",
    "deliveries",
    "documents",
    "fetch",
    "providers",
    "settings",
]
