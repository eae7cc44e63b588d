"""Test helpers for InvoiceHub.

Provides an in-memory keyring backend and fake site scripts for driving
the fetch orchestrator without a browser.
"""
