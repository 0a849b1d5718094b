"""Core configuration, logging and authentication."""
