"""Core application infrastructure: settings, security, dependencies."""
