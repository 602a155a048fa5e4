"""Construction of signed, form-encoded trading API requests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlencode

from .constants import RESERVED_PARAMS, Command
from .exceptions import ValidationError
from .signing import sign
from .types import Credentials

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class SignedRequest:
    """Encoded POST body and the headers that authenticate it."""

    command: Command
    nonce: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    def header_items(self) -> list[tuple[str, str]]:
        return list(self.headers.items())


def encode_params(params: Mapping[str, str]) -> bytes:
    """Form-encode parameters in insertion order."""
    return urlencode(list(params.items())).encode("ascii")


def build_params(command: Command, params: Mapping[str, str], nonce: int) -> dict[str, str]:
    """Return the full parameter set with ``nonce`` and ``command`` first."""
    collisions = RESERVED_PARAMS.intersection(params)
    if collisions:
        raise ValidationError(
            f"Parameters {sorted(collisions)} are reserved",
            field="params",
            value=sorted(collisions),
        )

    for key, value in params.items():
        if not isinstance(value, str):
            raise ValidationError(
                f"Parameter {key!r} must be a string, got {type(value).__name__}",
                field=key,
                value=value,
            )

    ordered: dict[str, str] = {"nonce": str(nonce), "command": Command(command).value}
    ordered.update(params)
    return ordered


def build_request(
    command: Command,
    params: Mapping[str, str],
    nonce: int,
    credentials: Credentials,
) -> SignedRequest:
    """Build the signed request for one command invocation.

    The ``Sign`` header is computed over the exact bytes returned as ``body``.
    """
    body = encode_params(build_params(command, params, nonce))
    headers = {
        "Key": credentials.api_key,
        "Sign": sign(credentials.secret, body),
        "Content-Type": FORM_CONTENT_TYPE,
    }
    return SignedRequest(command=Command(command), nonce=nonce, body=body, headers=headers)
