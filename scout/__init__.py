"""Artifact Scout — discovery and extraction of publicly shared artifacts."""

__version__ = "0.1.0"
