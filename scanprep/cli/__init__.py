"""Command line interface for scanprep."""
