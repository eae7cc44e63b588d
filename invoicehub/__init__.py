"""InvoiceHub: collect billing documents from many third-party accounts."""

__version__ = "0.1.0"
