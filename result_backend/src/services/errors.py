"""Classified failures of state store exchanges."""

import httpx


class StateStoreError(Exception):
    """Base class for every failure reported by a state store."""


class NotFoundError(StateStoreError):
    """Raised when the store does not know the identifier."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind.capitalize()} not found: {identifier}")


class ConflictError(StateStoreError):
    """Raised when the store rejects a creation or a state transition."""

    def __init__(self, kind: str, identifier: str, detail: str = ""):
        self.kind = kind
        self.identifier = identifier
        self.detail = detail
        message = f"Conflict on {kind} {identifier}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UnreachableError(StateStoreError):
    """Raised on transport failure, timeout or an undecodable response."""


class UnexpectedResponseError(StateStoreError):
    """Raised on a non-success status the client cannot interpret."""

    def __init__(self, status_code: int | None, body: str):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            super().__init__(f"Unexpected response from store: {body}")
        else:
            super().__init__(
                f"Unexpected response from store: HTTP {status_code}: {body}"
            )


class InvalidArgumentError(StateStoreError, ValueError):
    """Raised on a caller contract violation, before any store exchange."""


def require(value: str | None, name: str) -> str:
    """Return value, or raise InvalidArgumentError if it is blank."""
    if not value or not value.strip():
        raise InvalidArgumentError(f"{name} is required")
    return value


def raise_for_response(
    response: httpx.Response,
    expected: int | tuple[int, ...],
    kind: str,
    identifier: str,
) -> None:
    """Raise the classified error for a response without an expected status."""
    if isinstance(expected, int):
        expected = (expected,)
    if response.status_code in expected:
        return

    if response.status_code == 404:
        raise NotFoundError(kind, identifier)
    if response.status_code in (409, 412):
        raise ConflictError(kind, identifier, response.text)
    raise UnexpectedResponseError(response.status_code, response.text)
