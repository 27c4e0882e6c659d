"""Adapters for the audit ports."""
