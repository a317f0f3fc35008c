"""
Entry points for checking TBEP signatures on responses and notifications.

Both functions return a VerificationResult and never raise: the result says
pass/fail and, on failure, which step rejected the message.
"""
import logging
from typing import Optional, Union

from .credentials import Credentials
from .errors import (
    CryptoFailure,
    UnsupportedAlgorithmError,
    VerificationError,
    VerificationResult,
)
from .tbep import signature
from .tbep.constants import SignAlgorithm
from .tbep.headers import parse_authorization

logger = logging.getLogger(__name__)


def _failed(error: VerificationError) -> VerificationResult:
    logger.warning("TBEP signature verification failed [%s]: %s", error.error_code, error.message)
    return VerificationResult.failed(error)


def verify_signature_parts(
    credentials: Credentials,
    timestamp: str,
    nonce: str,
    body: Union[str, bytes],
    signature_b64: str,
    serial_number: str,
    algorithm: str = SignAlgorithm.SHA256_WITH_RSA.value,
) -> VerificationResult:
    try:
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        if algorithm != SignAlgorithm.SHA256_WITH_RSA.value:
            raise UnsupportedAlgorithmError(
                "Unsupported sign algorithm.", {"signature_algorithm": algorithm}
            )
        public_key = credentials.public_key_for(serial_number)
        plaintext = signature.build_plaintext(timestamp, nonce, body)
        result = signature.check(plaintext, signature_b64, public_key)
    except VerificationError as e:
        return _failed(e)
    except Exception as e:  # anything unexpected still fails closed
        return _failed(CryptoFailure(f"Unexpected verification failure: {e}"))

    if not result.ok:
        return _failed(result.error)
    return result


def verify_signature(
    credentials: Credentials,
    authorization: Optional[str],
    body: Union[str, bytes],
) -> VerificationResult:
    try:
        header = parse_authorization(authorization)
    except VerificationError as e:
        return _failed(e)
    return verify_signature_parts(
        credentials,
        timestamp=header.timestamp,
        nonce=header.nonce,
        body=body,
        signature_b64=header.signature,
        serial_number=header.serial_number,
        algorithm=header.algorithm,
    )
