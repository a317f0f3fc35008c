"""
Codec for the comma-separated attribute lists carried in TBEP headers.

    timestamp="1610000000",nonce="abc123",signature="...",tbep_serial_number="SN1",signature_algorithm="SHA256-RSA2048"

The same rule is used for TBEP-Authorization and TBEP-Encrypt; only the
required attribute set differs.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional

from ..errors import MalformedHeaderError

AUTHORIZATION_REQUIRED = ("timestamp", "nonce", "signature", "tbep_serial_number", "signature_algorithm")
ENCRYPTION_REQUIRED = ("enc_key", "iv", "algorithm")
# responses declare the key owner as platform_serial_number, requests as tbep_serial_number
ENCRYPTION_SERIAL_KEYS = ("platform_serial_number", "tbep_serial_number")


@dataclass(frozen=True)
class AuthorizationHeader:
    timestamp: str
    nonce: str
    signature: str
    serial_number: str
    algorithm: str


@dataclass(frozen=True)
class EncryptionHeader:
    encrypted_key: str
    iv: str
    serial_number: str
    algorithm: str
    platform_id: Optional[str] = None


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value.strip('"')


def parse_attributes(text: Optional[str]) -> Dict[str, Optional[str]]:
    """
    Split `text` into {name: value}. Values are split on the first `=` only,
    so base64 padding survives. An item without `=` maps to None.
    """
    if text is None or not text.strip():
        raise MalformedHeaderError("Header is empty.")

    attrs: Dict[str, Optional[str]] = {}
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, value = item.partition("=")
        name = name.strip()
        if not name:
            raise MalformedHeaderError(f"Header attribute without a name: {item!r}.")
        if name in attrs:
            raise MalformedHeaderError(f"Duplicate header attribute `{name}`.", {"attribute": name})
        attrs[name] = _unquote(value) if sep else None
    return attrs


def _require(attrs: Mapping[str, Optional[str]], names: Iterable[str], header: str) -> None:
    missing = [n for n in names if not attrs.get(n)]
    if missing:
        raise MalformedHeaderError(
            f"Missing required attribute(s) in `{header}`: {', '.join(missing)}.",
            {"header": header, "missing": missing},
        )


def parse_authorization(text: Optional[str]) -> AuthorizationHeader:
    if text is None or not text.strip():
        raise MalformedHeaderError("Could not read value of `TBEP-Authorization`.")
    attrs = parse_attributes(text)
    _require(attrs, AUTHORIZATION_REQUIRED, "TBEP-Authorization")
    return AuthorizationHeader(
        timestamp=attrs["timestamp"],
        nonce=attrs["nonce"],
        signature=attrs["signature"],
        serial_number=attrs["tbep_serial_number"],
        algorithm=attrs["signature_algorithm"],
    )


def parse_encryption(text: Optional[str]) -> EncryptionHeader:
    if text is None or not text.strip():
        raise MalformedHeaderError("Could not read value of `TBEP-Encrypt`.")
    attrs = parse_attributes(text)
    _require(attrs, ENCRYPTION_REQUIRED, "TBEP-Encrypt")
    serial_number = next((attrs[k] for k in ENCRYPTION_SERIAL_KEYS if attrs.get(k)), None)
    if not serial_number:
        raise MalformedHeaderError(
            "Missing required attribute(s) in `TBEP-Encrypt`: platform_serial_number.",
            {"header": "TBEP-Encrypt", "missing": ["platform_serial_number"]},
        )
    return EncryptionHeader(
        encrypted_key=attrs["enc_key"],
        iv=attrs["iv"],
        serial_number=serial_number,
        algorithm=attrs["algorithm"],
        platform_id=attrs.get("platform_id"),
    )


def format_attributes(attrs: Mapping[str, Optional[str]]) -> str:
    return ",".join(f'{k}="{"" if v is None else v}"' for k, v in attrs.items())


def format_authorization(
    platform_id: str,
    serial_number: str,
    nonce: str,
    timestamp: str,
    signature: str,
    algorithm: str,
) -> str:
    return format_attributes({
        "platform_id": platform_id,
        "platform_serial_number": serial_number,
        "nonce": nonce,
        "timestamp": timestamp,
        "signature": signature,
        "signature_algorithm": algorithm,
    })


def format_encryption(encrypted_key: str, iv: str, serial_number: str, algorithm: str) -> str:
    return format_attributes({
        "enc_key": encrypted_key,
        "iv": iv,
        "tbep_serial_number": serial_number,
        "algorithm": algorithm,
    })
