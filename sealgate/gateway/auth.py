"""Credential extraction from the Authorization header."""

from __future__ import annotations

from starlette.datastructures import Headers

from sealgate.gateway.errors import InvalidCredentialFormat, MissingCredential

AUTHORIZATION = b"authorization"
SCHEME = "basic"


class Credential:
    """Opaque key material taken from one request.

    The value is never split or decoded, and its repr is redacted so it
    cannot end up in a log line by accident.
    """

    __slots__ = ("_secret",)

    def __init__(self, secret: bytes):
        self._secret = bytes(secret)

    def reveal(self) -> bytes:
        return self._secret

    def __repr__(self) -> str:
        return "Credential(<redacted>)"

    __str__ = __repr__


def extract(headers: Headers) -> Credential:
    """Return the Basic token, verbatim, as a Credential.

    Raises MissingCredential when there is no Authorization header and
    InvalidCredentialFormat when it is not printable ASCII (tabs allowed),
    has no scheme/value separator, or uses a scheme other than Basic.

    Note: Basic credentials are normally base64("<user>:<password>"). Here
    the scheme is only framing; the whole token is the passphrase.
    """
    value = next((v for k, v in headers.raw if k.lower() == AUTHORIZATION), None)
    if value is None:
        raise MissingCredential()

    try:
        text = value.decode("ascii")
    except UnicodeDecodeError:
        raise InvalidCredentialFormat("Authorization header is not valid text") from None
    # Visible ASCII, space and horizontal tab
    if not all(c == "\t" or c.isprintable() for c in text):
        raise InvalidCredentialFormat("Authorization header is not valid text")

    scheme, sep, token = text.partition(" ")
    if not sep:
        raise InvalidCredentialFormat("Authorization header has invalid format")
    if scheme.lower() != SCHEME:
        raise InvalidCredentialFormat("not using Basic authorization scheme")

    return Credential(token.encode("ascii"))
