"""Exception types raised by the SOPS secret provider.

Everything raised while handling a lifecycle event derives from
``ProviderError``.  The lifecycle handler logs the underlying error and
re-raises a single opaque ``ProviderFailed`` to CloudFormation.
"""

from __future__ import annotations


class ProviderError(Exception):
    """Base exception for provider errors."""


class ConfigurationError(ProviderError):
    """Raised when resource properties or environment settings are invalid."""


class FetchError(ProviderError):
    """Raised when the encrypted file cannot be read from S3."""


class DecryptionFailed(ProviderError):
    """Raised when the sops process exits with a non-zero code."""

    def __init__(self, exit_code: int | None, stderr: str) -> None:
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"sops exited with code {exit_code}")


class DecodeFailed(ProviderError):
    """Raised when decrypted output is not the JSON document we expect."""


class DecryptionTimeout(ProviderError):
    """Raised when sops does not finish within the configured timeout."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"sops did not finish within {timeout_seconds}s")


class SecretNotFound(ProviderError):
    """Raised when a required path does not resolve in the decrypted file."""

    def __init__(self, path: list[str]) -> None:
        self.path = list(path)
        super().__init__(f"secret could not be found at path {self.path}")


class InvalidEncoding(ProviderError):
    """Raised when a mapping requests an encoding other than string/json."""

    def __init__(self, encoding: object) -> None:
        self.encoding = encoding
        super().__init__(f"Unknown encoding {encoding!r}")


class UnknownEventType(ProviderError):
    """Raised for a RequestType other than Create, Update or Delete."""

    def __init__(self, request_type: object) -> None:
        self.request_type = request_type
        super().__init__(f"Unknown event type {request_type!r}")


class ParameterWriteError(ProviderError):
    """Raised when PutParameter fails and strict writes are enabled."""


class ProviderFailed(Exception):
    """Opaque failure surfaced to CloudFormation.

    Details of the underlying error are only written to the logs.
    """

    def __init__(self) -> None:
        super().__init__("Failed")
