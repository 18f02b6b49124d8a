"""Storefront: accounts, catalog, cart and order lifecycle on Protean."""
