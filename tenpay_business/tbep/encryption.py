"""
Sensitive-field encryption announced through the TBEP-Encrypt header.

Request side: a random SM4 key and IV encrypt the sensitive fields; the key is
wrapped with RSA-OAEP under a TBEP platform public key and sent as `enc_key`.
Response side: `enc_key` is unwrapped with the merchant private key.
"""
import base64
import binascii
import secrets
from typing import Optional, Union

from ..credentials import Credentials
from ..errors import EncryptionError, UnsupportedAlgorithmError
from ..models.base import RequestEncryption, ResponseEncryption
from ..utils.security import rsa_oaep_decrypt, rsa_oaep_encrypt, sm4_cbc_decrypt, sm4_cbc_encrypt
from .constants import EncryptionAlgorithm

KEY_LENGTH = 16
IV_LENGTH = 16


class FieldCipher:
    """SM4-128-CBC with PKCS#7 padding; ciphertext is exchanged as base64."""

    def __init__(self, key: bytes, iv: bytes, metadata: Union[RequestEncryption, ResponseEncryption, None] = None):
        if len(key) != KEY_LENGTH or len(iv) != IV_LENGTH:
            raise EncryptionError("SM4 key and IV must both be 16 bytes.")
        self.key = key
        self.iv = iv
        self.metadata = metadata

    def encrypt(self, text: str) -> str:
        try:
            return base64.b64encode(sm4_cbc_encrypt(self.key, self.iv, text.encode("utf-8"))).decode("ascii")
        except ValueError as e:
            raise EncryptionError(f"Could not encrypt field: {e}") from e

    def decrypt(self, ciphertext: str) -> str:
        try:
            raw = base64.b64decode(ciphertext, validate=True)
            return sm4_cbc_decrypt(self.key, self.iv, raw).decode("utf-8")
        except (binascii.Error, ValueError) as e:
            raise EncryptionError(f"Could not decrypt field: {e}") from e


def _check_algorithm(algorithm: Optional[str]) -> None:
    if algorithm != EncryptionAlgorithm.RSA_OAEP_WITH_SM4_128_CBC.value:
        raise UnsupportedAlgorithmError(
            "Unsupported encryption algorithm.", {"algorithm": algorithm}
        )


def generate_request_encryption(credentials: Credentials, serial_number: Optional[str] = None) -> FieldCipher:
    """
    Fresh key + IV for one request. The returned cipher's `metadata` goes into
    `request.tbep_encryption`. Raises UnknownKeyError if no TBEP public key
    matches `serial_number` (or none is registered at all).
    """
    serial_number = serial_number or credentials.default_serial_number()
    public_key = credentials.public_key_for(serial_number)
    key = secrets.token_bytes(KEY_LENGTH)
    iv = secrets.token_bytes(IV_LENGTH)
    try:
        wrapped = rsa_oaep_encrypt(public_key, key)
    except (ValueError, TypeError) as e:
        raise EncryptionError(f"Could not wrap encryption key: {e}") from e

    metadata = RequestEncryption(
        encrypted_key=base64.b64encode(wrapped).decode("ascii"),
        iv=base64.b64encode(iv).decode("ascii"),
        serial_number=serial_number,
        algorithm=EncryptionAlgorithm.RSA_OAEP_WITH_SM4_128_CBC.value,
    )
    return FieldCipher(key, iv, metadata)


def open_response_encryption(credentials: Credentials, encryption: ResponseEncryption) -> FieldCipher:
    _check_algorithm(encryption.algorithm)
    if encryption.serial_number != credentials.serial_number:
        raise EncryptionError(
            "Response key was wrapped for a different platform certificate.",
            {"serial_number": encryption.serial_number},
        )
    try:
        key = rsa_oaep_decrypt(credentials.private_key, base64.b64decode(encryption.encrypted_key, validate=True))
        iv = base64.b64decode(encryption.iv, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise EncryptionError(f"Could not unwrap encryption key: {e}") from e
    return FieldCipher(key, iv, encryption)
