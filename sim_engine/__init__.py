"""CASINOSIM — simulation engines."""
