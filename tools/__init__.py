"""CASINOSIM — command-line entry point and console reporting."""
