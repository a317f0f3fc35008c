from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Any, Dict

# Endpoint-specific models subclass these two and declare their own fields;
# unknown fields are kept so new platform fields pass through untouched.


class RequestEncryption(BaseModel):
    """Metadata sent in the request TBEP-Encrypt header."""
    encrypted_key: str
    iv: str
    serial_number: str
    algorithm: Optional[str] = None


class ResponseEncryption(BaseModel):
    """Metadata read from the response TBEP-Encrypt header."""
    platform_id: Optional[str] = None
    encrypted_key: str
    iv: str
    serial_number: str
    algorithm: str


# fields that steer the transport and are never serialized into the body
TRANSPORT_FIELDS = {"timeout", "tbep_encryption"}


class TenpayBusinessRequest(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    timeout: Optional[float] = Field(default=None, description="per-request timeout, seconds")
    tbep_encryption: Optional[RequestEncryption] = None

    def to_body(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, exclude=TRANSPORT_FIELDS)


class TenpayBusinessResponse(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    raw_status: int = 0
    raw_headers: Dict[str, str] = {}
    raw_body: bytes = b""
    tbep_encryption: Optional[ResponseEncryption] = None

    # error bodies: {"code": "...", "message": "...", "detail": {...}}
    code: Optional[Any] = None
    message: Optional[Any] = None
    detail: Optional[Any] = None

    def is_successful(self) -> bool:
        return 200 <= self.raw_status < 300 and not self.code
