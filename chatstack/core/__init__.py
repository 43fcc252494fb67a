"""Provisioning pipeline steps for chatstack."""
