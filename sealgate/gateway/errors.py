"""Gateway error taxonomy. Each category maps to exactly one status and body."""

from __future__ import annotations


class GatewayError(Exception):
    """Base for every failure resolved at the request boundary.

    ``public_message`` is what the client sees. ``detail`` stays server-side.
    """

    outcome = "internal-unexpected"
    status_code = 500
    public_message = "internal server error"

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.public_message)
        self.detail = detail or self.public_message


class MissingCredential(GatewayError):
    outcome = "missing-credential"
    status_code = 401
    public_message = "authorization is required to access this resource"


class InvalidCredentialFormat(GatewayError):
    """The Authorization header could not be used.

    ``reason`` is a fixed category string; it never contains header bytes.
    """

    outcome = "invalid-credential-format"
    status_code = 400

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return (
            "authorization was invalid. make sure to use the Basic scheme. "
            f"reason: {self.reason}"
        )


class ResourceUnavailable(GatewayError):
    """Covers both "does not exist" and "outside the root"; never tells which."""

    outcome = "resource-unavailable"
    status_code = 404
    public_message = ""


class DecryptionFailed(GatewayError):
    outcome = "decryption-failed"
    status_code = 500
    public_message = "decryption failed"


class InternalUnexpected(GatewayError):
    outcome = "internal-unexpected"
    status_code = 500
    public_message = "internal server error"
