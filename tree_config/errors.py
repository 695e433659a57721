# AGPL-3.0 License

"""
Errors raised while resolving a build configuration.
"""


class TreeConfigError(Exception):
    """Base class for every error the extension reports to its caller."""


class ConfigurationError(TreeConfigError):
    """The plugin instance has no usable SCM credentials or provider settings."""


class TransportError(TreeConfigError):
    """The SCM provider could not answer a request."""


class NotFoundError(TransportError):
    """The SCM provider answered that a commit, pull request or file does not exist."""


class InvalidRefError(TreeConfigError):
    """A pull request ref that does not carry a pull request number."""


class NoConfigFoundError(TreeConfigError):
    """None of the candidate paths held a configuration file."""

    def __init__(self, message: str = "did not find a .drone.yml"):
        super().__init__(message)
