"""Error taxonomy for generation attempts."""

from __future__ import annotations

from pathlib import Path


class LumenError(RuntimeError):
    """Base class for engine failures other than file I/O."""


class MediaReadError(OSError):
    """A user-supplied reference file could not be read."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"Could not read {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class CredentialError(LumenError):
    """The user declined or failed the credential selection flow."""


class ServiceError(LumenError):
    def __init__(self, message: str, *, code: int | None = None, service: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.service = service


class CredentialRejectedError(ServiceError):
    """The service answered NotFound for the credential in use."""


class GenerationInProgressError(LumenError):
    """A generation was triggered while another one is still running."""


NOT_FOUND_MARKER = "requested entity was not found"


def is_not_found(code: int | None, message: str | None) -> bool:
    if code == 404:
        return True
    return NOT_FOUND_MARKER in str(message or "").lower()
