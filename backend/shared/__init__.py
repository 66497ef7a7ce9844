"""Configuration and logging shared across packages."""
