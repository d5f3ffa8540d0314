"""
Shopcore: tenant resolution, provisioning, per-tenant document storage and
ledger aggregates for the multi-tenant storefront back office.
"""

__version__ = "0.1.0"
