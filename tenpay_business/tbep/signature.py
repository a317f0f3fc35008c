"""
SHA256withRSA (PKCS#1 v1.5) signatures over the TBEP canonical plaintext:

    "{timestamp}\\n{nonce}\\n{body}\\n"

Newlines inside `body` are not escaped; the platform signs the same bytes.
"""
import base64
import binascii
import logging
from typing import Union

from Crypto.PublicKey import RSA

from ..errors import CryptoFailure, SigningError, VerificationResult
from ..utils.security import load_rsa_key, rsa_sign_sha256, rsa_verify_sha256

logger = logging.getLogger(__name__)

KeyLike = Union[str, RSA.RsaKey]


def build_plaintext(timestamp: str, nonce: str, body: str) -> str:
    return f"{timestamp}\n{nonce}\n{body}\n"


def sign(plaintext: str, private_key: KeyLike) -> str:
    """Returns the base64 signature. Raises SigningError if the key is unusable."""
    try:
        key = private_key if isinstance(private_key, RSA.RsaKey) else load_rsa_key(private_key)
        if not key.has_private():
            raise SigningError("Signing key has no private part.")
        signature = rsa_sign_sha256(key, plaintext.encode("utf-8"))
    except SigningError:
        raise
    except (ValueError, TypeError, IndexError) as e:
        raise SigningError(f"Could not sign with the given private key: {e}") from e
    return base64.b64encode(signature).decode("ascii")


def check(plaintext: str, signature: str, public_key: KeyLike) -> VerificationResult:
    try:
        raw_signature = base64.b64decode(signature or "", validate=True)
    except (binascii.Error, ValueError) as e:
        return VerificationResult.failed(CryptoFailure(f"Signature is not valid base64: {e}"))
    if not raw_signature:
        return VerificationResult.failed(CryptoFailure("Signature is empty."))

    try:
        key = public_key if isinstance(public_key, RSA.RsaKey) else load_rsa_key(public_key)
        matched = rsa_verify_sha256(key, plaintext.encode("utf-8"), raw_signature)
    except (ValueError, TypeError, IndexError) as e:
        return VerificationResult.failed(CryptoFailure(f"Public key is unusable: {e}"))

    if not matched:
        logger.debug("Signature mismatch over %d-byte plaintext", len(plaintext))
        return VerificationResult.failed(CryptoFailure("Signature does not match."))
    return VerificationResult.passed()


def verify(plaintext: str, signature: str, public_key: KeyLike) -> bool:
    return check(plaintext, signature, public_key).ok
