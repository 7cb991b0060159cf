"""
Games module - Catalog data for concrete game variants.

Each variant has its own subpackage with:
- Stock, event and action card definitions
- A factory that builds and validates its Catalog
"""
