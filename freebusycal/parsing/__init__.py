"""Parsing and encoding of rfc5545 components and properties."""
