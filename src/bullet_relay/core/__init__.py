"""Core configuration and prompt text."""
