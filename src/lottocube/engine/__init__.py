"""Probability-and-search engine."""
