"""HTTP API for the Bullet Relay service."""
