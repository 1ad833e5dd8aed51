"""Billing extract importer: validation, table synthesis and amount-in-words."""

__version__ = "0.1.0"
