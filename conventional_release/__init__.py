"""Semantic versioning and GitHub releases driven by conventional commits."""
