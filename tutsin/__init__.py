"""Tutsin Digital API."""
