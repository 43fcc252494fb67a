"""Jinja2 templates for the per-service config files."""
