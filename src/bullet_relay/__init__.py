"""Bullet Relay: resume bullet points with a single-use credential relay."""

__version__ = "0.1.0"
