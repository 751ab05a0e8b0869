"""Parsers for extractor payloads."""
