from enum import Enum

AUTHORIZATION_HEADER = "TBEP-Authorization"
ENCRYPTION_HEADER = "TBEP-Encrypt"


class SignAlgorithm(str, Enum):
    SHA256_WITH_RSA = "SHA256-RSA2048"


class EncryptionAlgorithm(str, Enum):
    RSA_OAEP_WITH_SM4_128_CBC = "RSA_OAEP_WITH_SM4_128_CBC"
