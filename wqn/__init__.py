"""Wrong Question Notebook: review session engine and API."""

__version__ = "1.0.0"
