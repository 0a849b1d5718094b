"""Arsyilla: GitHub-backed file backup with share links."""

__version__ = "1.0.0"
