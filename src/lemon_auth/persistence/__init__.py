"""Persistence implementations for lemon_auth repositories."""
