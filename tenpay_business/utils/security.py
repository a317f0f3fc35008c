import base64
from Crypto.Cipher import PKCS1_OAEP
from Crypto.Hash import SHA256
from Crypto.PublicKey import RSA
from Crypto.Signature import pkcs1_15
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes


def load_rsa_key(key_text: str) -> RSA.RsaKey:
    """
    Accepts PEM (PKCS#1 / PKCS#8 / SubjectPublicKeyInfo / X.509 certificate)
    or the bare base64 body of a DER key, as the platform console exports both.
    Raises ValueError on anything else.
    """
    text = (key_text or "").strip()
    if not text:
        raise ValueError("empty key")
    if text.startswith("-----BEGIN"):
        return RSA.import_key(text)
    try:
        der = base64.b64decode("".join(text.split()), validate=True)
    except (ValueError, TypeError) as e:
        raise ValueError(f"key is neither PEM nor base64 DER: {e}") from e
    return RSA.import_key(der)


def rsa_sign_sha256(private_key: RSA.RsaKey, message: bytes) -> bytes:
    return pkcs1_15.new(private_key).sign(SHA256.new(message))


def rsa_verify_sha256(public_key: RSA.RsaKey, message: bytes, signature: bytes) -> bool:
    try:
        pkcs1_15.new(public_key).verify(SHA256.new(message), signature)
    except ValueError:
        return False
    return True


def rsa_oaep_encrypt(public_key: RSA.RsaKey, data: bytes) -> bytes:
    return PKCS1_OAEP.new(public_key).encrypt(data)


def rsa_oaep_decrypt(private_key: RSA.RsaKey, data: bytes) -> bytes:
    return PKCS1_OAEP.new(private_key).decrypt(data)


def sm4_cbc_encrypt(key: bytes, iv: bytes, data: bytes) -> bytes:
    padder = padding.PKCS7(128).padder()
    raw = padder.update(data) + padder.finalize()
    encryptor = Cipher(algorithms.SM4(key), modes.CBC(iv)).encryptor()
    return encryptor.update(raw) + encryptor.finalize()


def sm4_cbc_decrypt(key: bytes, iv: bytes, data: bytes) -> bytes:
    decryptor = Cipher(algorithms.SM4(key), modes.CBC(iv)).decryptor()
    raw = decryptor.update(data) + decryptor.finalize()
    unpadder = padding.PKCS7(128).unpadder()
    return unpadder.update(raw) + unpadder.finalize()
