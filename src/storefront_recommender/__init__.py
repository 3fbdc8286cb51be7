"""Activity-based product recommendations for the storefront."""

__version__ = "1.0.0"
