from .client import TenpayBusinessClient
from .credentials import Credentials
from .errors import (
    CryptoFailure,
    EncryptionError,
    MalformedHeaderError,
    SigningError,
    TenpayBusinessError,
    TenpayBusinessRequestError,
    UnknownKeyError,
    UnsupportedAlgorithmError,
    VerificationError,
    VerificationResult,
)
from .models.base import TenpayBusinessRequest, TenpayBusinessResponse
from .settings import ClientOptions
from .verification import verify_signature, verify_signature_parts

__version__ = "0.1.0"
