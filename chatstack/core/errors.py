"""Exception hierarchy for chatstack operations."""


class ChatstackError(Exception):
    """Base class for errors that abort a provisioning run."""
    pass


class ConfigError(ChatstackError):
    """Raised when the stack configuration is missing or invalid."""
    pass


class SecretsError(ChatstackError):
    """Raised when an existing secrets file cannot be used."""
    pass


class HomeserverConfigError(ChatstackError):
    """Raised when homeserver.yaml cannot be loaded or patched."""
    pass


class DockerError(ChatstackError):
    """Raised when a docker or docker compose invocation fails."""

    def __init__(self, message: str, returncode: int = 1):
        super().__init__(message)
        self.returncode = returncode


class BridgeRegistrationError(ChatstackError):
    """Raised when the bridge image did not produce its registration."""
    pass
