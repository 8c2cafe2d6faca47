"""CASINOSIM — configuration: env-driven defaults and parameter schema."""
