from typing import Dict, Literal, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientOptions(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TENPAY_BUSINESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ENDPOINT: str = "https://api.businesspay.qq.com"
    TIMEOUT_SEC: float = 30
    RETRY_MAX: int = 3
    # left unset, the SDK does not touch logger levels
    LOG_LEVEL: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    SIGN_ALGORITHM: str = "SHA256-RSA2048"

    # Merchant platform certificate: signs requests, unwraps response keys
    PLATFORM_ID: str
    PLATFORM_CERTIFICATE_SERIAL_NUMBER: str
    PLATFORM_CERTIFICATE_PRIVATE_KEY: str

    # TBEP platform certificate(s): verify responses, wrap request keys
    TBEP_CERTIFICATE_SERIAL_NUMBER: Optional[str] = None
    TBEP_CERTIFICATE_PUBLIC_KEY: Optional[str] = None
    # extra serial number -> public key pairs, e.g. during certificate rotation
    TBEP_CERTIFICATES: Dict[str, str] = {}

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v
