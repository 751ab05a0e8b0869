"""Conduction analysis: rate tracking, morphology validation and classification."""
