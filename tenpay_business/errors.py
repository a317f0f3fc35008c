"""
Exception hierarchy and verification result for the TBEP SDK.

Verification-path errors are never raised across the public verification
boundary; they travel inside a VerificationResult. Signing and transport
errors are raised.
"""
from dataclasses import dataclass
from typing import Optional, Dict, Any


class TenpayBusinessError(Exception):
    """Base exception for all SDK errors."""

    error_code = "tbep:error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class VerificationError(TenpayBusinessError):
    """Base for everything that can make a signature check fail."""

    error_code = "tbep:verification:failed"


class MalformedHeaderError(VerificationError):
    """
    Header text is empty, unparsable, has duplicate attributes,
    or lacks a required attribute.
    """

    error_code = "tbep:header:malformed"


class UnknownKeyError(VerificationError):
    """Declared serial number has no registered public key."""

    error_code = "tbep:credentials:unknown_key"


class UnsupportedAlgorithmError(VerificationError):
    """Signature or encryption algorithm is not recognized."""

    error_code = "tbep:algorithm:unsupported"


class CryptoFailure(VerificationError):
    """Signature does not match, or key/signature material is unusable."""

    error_code = "tbep:signature:invalid"


class SigningError(TenpayBusinessError):
    """Private key is malformed; the client is misconfigured."""

    error_code = "tbep:signing:failed"


class EncryptionError(TenpayBusinessError):
    """Key wrap/unwrap or symmetric cipher failure."""

    error_code = "tbep:encryption:failed"


class TenpayBusinessRequestError(TenpayBusinessError):
    """HTTP transport failure."""

    error_code = "tbep:request:failed"


@dataclass(frozen=True)
class VerificationResult:
    ok: bool
    error: Optional[VerificationError] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def passed(cls) -> "VerificationResult":
        return cls(ok=True)

    @classmethod
    def failed(cls, error: VerificationError) -> "VerificationResult":
        return cls(ok=False, error=error)
