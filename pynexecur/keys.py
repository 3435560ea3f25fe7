"""
Credential derivation for device registration.

Nexecur does not use a standard KDF: the salt returned by /webservices/salt is
prepended to the UTF-16LE password and hashed twice. SHA-1 gives the value sent
as "pin", SHA-256 the value sent as "password".
"""
import base64
import binascii
import functools
import hashlib
import re
from dataclasses import dataclass

_NON_BASE64 = re.compile(r"[^A-Za-z0-9+/]")


@dataclass(frozen=True)
class CredentialKeys:
    """Hashed credentials, both base64 encoded"""

    password_hash: str
    pin_hash: str


def decode_salt(salt: str) -> bytes:
    """
    Decode a base64 salt the permissive way the vendor app does.

    URL-safe characters are accepted, anything outside the alphabet is dropped,
    decoding stops at the first "=" and missing padding is restored.
    A dangling single character carries no full byte and is ignored.
    Never raises.
    """
    text = (salt or "").split("=", 1)[0]
    text = text.replace("-", "+").replace("_", "/")
    text = _NON_BASE64.sub("", text)
    if len(text) % 4 == 1:
        text = text[:-1]
    text += "=" * (-len(text) % 4)
    try:
        return base64.b64decode(text)
    except (binascii.Error, ValueError):
        return b""


def credential_buffer(password: str, salt: str) -> bytes:
    """Salt bytes followed by the UTF-16LE password bytes."""
    password_bytes = (password or "").encode("utf-16-le", errors="surrogatepass")
    return decode_salt(salt) + password_bytes


def _b64_digest(algorithm: str, data: bytes) -> str:
    return base64.b64encode(hashlib.new(algorithm, data).digest()).decode("ascii")


@functools.lru_cache(maxsize=16)
def derive_keys(password: str, salt: str) -> CredentialKeys:
    """
    Derive the hashed password and PIN for a (password, salt) pair.

    Results are cached, so a pair is only hashed once per process.
    """
    buffer = credential_buffer(password, salt)
    return CredentialKeys(
        password_hash=_b64_digest("sha256", buffer),
        pin_hash=_b64_digest("sha1", buffer),
    )
