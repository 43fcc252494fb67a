"""chatstack - provision a self-hosted Matrix chat stack with Docker Compose."""

__version__ = "0.1.0"
