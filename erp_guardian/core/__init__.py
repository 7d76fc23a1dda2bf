"""Shared settings and logging configuration."""
