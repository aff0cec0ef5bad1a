"""Core application plumbing: configuration, security, dependencies."""
