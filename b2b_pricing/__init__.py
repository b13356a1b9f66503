"""B2B price and logistics calculation engine."""

__version__ = "1.0.0"
