"""Exception hierarchy for myvocab.

Only :class:`ProviderError` (and raw transport errors) are retried by the
enrichment service. Validation and configuration faults mean the call
cannot succeed as constructed, so they surface immediately.
"""

from __future__ import annotations


class MyVocabError(Exception):
    """Base exception for all myvocab errors."""


class ValidationError(MyVocabError):
    """Caller-supplied input failed a precondition.

    Attributes:
        field: Name of the offending input (``"text"``, ``"language"``, ...).
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class ConfigurationError(MyVocabError):
    """No usable provider or credential is available.

    Attributes:
        provider_id: The provider the failure refers to, if any.
    """

    def __init__(self, message: str, provider_id: str | None = None) -> None:
        self.provider_id = provider_id
        super().__init__(message)


class ProviderError(MyVocabError):
    """Upstream call failed: HTTP status, empty payload, bad JSON or bad schema.

    Attributes:
        provider: Display name of the provider that failed.
        status_code: HTTP status for non-2xx responses, otherwise None.
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class RetryExhaustedError(MyVocabError):
    """Every attempt of a retried operation failed.

    Attributes:
        operation: Operation name (e.g. ``"enrich"``).
        attempts: Number of attempts made.
        last_error: The exception raised by the final attempt.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        attempts: int,
        last_error: BaseException | None = None,
    ) -> None:
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(message)


class DecryptionError(MyVocabError):
    """A stored secret could not be decrypted (tampered data or wrong key)."""
