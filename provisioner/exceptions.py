"""Base exceptions shared by all provisioner modules."""


class ProvisionError(Exception):
    """Base exception for provisioning errors."""

    pass


class ConfigError(ProvisionError):
    """Raised when an environment setting has an invalid value.

    Attributes:
        variable: Name of the offending environment variable.
    """

    def __init__(self, variable: str, message: str):
        self.variable = variable
        super().__init__(f"{variable}: {message}")
