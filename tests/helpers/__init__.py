"""
Test helper utilities for AVTRACK testing.

This module provides reusable utilities for:
- Generating synthetic wave event series
- Building extractor payloads for pipeline, CLI and server tests
"""
