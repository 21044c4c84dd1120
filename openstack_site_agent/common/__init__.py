"""Common configuration, lookup and saga utilities."""
