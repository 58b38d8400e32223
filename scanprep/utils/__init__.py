"""Utility helpers for scanprep."""
