"""Core scanprep components."""
