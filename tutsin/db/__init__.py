"""Database models, types and engine/session setup."""
