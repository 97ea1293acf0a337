"""Storefront: catalog and order mirroring against a remote commerce platform."""
