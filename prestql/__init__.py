"""Build parameterised PostgreSQL statements from HTTP request data and run them."""

__version__ = "0.1.0"