"""Shopfloor: authentication and production scheduling API."""
