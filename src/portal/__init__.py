"""Facebook login and role administration API."""

__version__ = "0.1.0"
