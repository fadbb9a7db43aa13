"""Storefront social backend application."""
