"""Authenticated proxy routes forwarding to the HR backend."""
