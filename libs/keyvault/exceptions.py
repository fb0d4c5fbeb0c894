"""
Key Vault Lookup Exception Hierarchy.

Exception hierarchy:
    KeyVaultError (base)
    ├── AuthError - Bearer token could not be obtained from the metadata endpoint
    ├── RemoteError - Secret store answered with a non-2xx, non-404 status
    ├── NotFoundError - Secret is absent and create-on-miss is disabled
    ├── PolicyError - Password policy leaves no usable characters
    └── ConfigurationError - Request could not be resolved or validated

Every exception carries the secret name and vault for diagnosis. None of them
ever carries a secret value.
"""


class KeyVaultError(Exception):
    """
    Base exception for all key vault lookup errors.

    Attributes:
        secret_name: Logical secret name (e.g., "db-pass")
        vault: Vault name / store locator (e.g., "kv1")
        message: Human-readable error message (MUST NOT include secret value)

    Example:
        >>> str(KeyVaultError("Timeout", "db-pass", "kv1"))
        'Timeout (secret: db-pass, vault: kv1)'
    """

    def __init__(
        self,
        message: str,
        secret_name: str | None = None,
        vault: str | None = None,
    ) -> None:
        super().__init__(message)
        self.secret_name = secret_name
        self.vault = vault
        self.message = message

    def __str__(self) -> str:
        context_parts = []
        if self.secret_name:
            context_parts.append(f"secret: {self.secret_name}")
        if self.vault:
            context_parts.append(f"vault: {self.vault}")

        if context_parts:
            context = ", ".join(context_parts)
            return f"{self.message} ({context})"
        return self.message


class AuthError(KeyVaultError):
    """
    Raised when a bearer token cannot be acquired.

    Causes:
    - Metadata endpoint unreachable (not running on a cloud instance)
    - Metadata endpoint returned a non-success status (no identity assigned)
    - Token response has no ``access_token`` field
    """

    def __init__(self, reason: str, resource: str | None = None) -> None:
        if not isinstance(reason, str) or not reason:
            raise TypeError("reason must be a non-empty string")

        message = f"Token acquisition failed: {reason}"
        if resource:
            message += f" (resource: {resource})"
        super().__init__(message=message)
        self.reason = reason
        self.resource = resource


class RemoteError(KeyVaultError):
    """
    Raised when the secret store returns an unexpected response.

    ``status_code`` is None when the request never got an HTTP answer
    (connection refused, timeout). ``body`` holds the raw response body to aid
    diagnosis; store error bodies never contain the secret value.
    """

    def __init__(
        self,
        secret_name: str,
        vault: str,
        reason: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        if not isinstance(secret_name, str) or not secret_name:
            raise TypeError("secret_name must be a non-empty string")
        if not isinstance(reason, str) or not reason:
            raise TypeError("reason must be a non-empty string")

        message = reason
        if status_code is not None:
            message = f"{reason} [HTTP {status_code}]"
        if body:
            message = f"{message}: {body}"
        super().__init__(message=message, secret_name=secret_name, vault=vault)
        self.status_code = status_code
        self.body = body


class NotFoundError(KeyVaultError):
    """Raised when a secret does not exist and creating it is not enabled."""

    def __init__(self, secret_name: str, vault: str, version: str | None = None) -> None:
        if not isinstance(secret_name, str) or not secret_name:
            raise TypeError("secret_name must be a non-empty string")

        message = (
            f"No matching secret '{secret_name}' + version {version or 'latest'} found, "
            "and creating a missing secret is not enabled"
        )
        super().__init__(message=message, secret_name=secret_name, vault=vault)
        self.version = version


class PolicyError(KeyVaultError):
    """Raised when a password policy excludes every candidate character."""


class ConfigurationError(KeyVaultError):
    """Raised when a lookup request cannot be built from the supplied options."""
