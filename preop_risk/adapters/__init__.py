"""Adapters that feed patient records into the scoring core."""
