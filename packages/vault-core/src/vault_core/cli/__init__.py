"""Vault operator CLI."""
