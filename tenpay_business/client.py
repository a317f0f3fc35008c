import json
import logging
import secrets
import time
from typing import Optional, Type, TypeVar

import httpx
from pydantic import ValidationError

from .credentials import Credentials
from .errors import MalformedHeaderError, TenpayBusinessRequestError, VerificationResult
from .models.base import ResponseEncryption, TenpayBusinessRequest, TenpayBusinessResponse
from .settings import ClientOptions
from .tbep import signature
from .tbep.constants import AUTHORIZATION_HEADER, ENCRYPTION_HEADER, EncryptionAlgorithm, SignAlgorithm
from .tbep.encryption import FieldCipher, generate_request_encryption, open_response_encryption
from .tbep.headers import format_authorization, format_encryption, parse_encryption
from .utils.http import client, retry_policy
from .verification import verify_signature

logger = logging.getLogger(__name__)

TResponse = TypeVar("TResponse", bound=TenpayBusinessResponse)

SIMPLE_METHODS = {"GET", "HEAD", "OPTIONS"}


class TenpayBusinessClient:
    """
    HTTP client for the Tenpay Business (TBEP) API.

    Every outbound request carries a TBEP-Authorization header signed with the
    merchant platform certificate. Responses come back as pydantic models with
    the raw status/headers/body attached; call `verify_response` to check the
    platform signature before trusting one.

        async with TenpayBusinessClient(ClientOptions()) as c:
            resp = await c.send_request("POST", "/v3/mse-pay/payments", request)
            if not c.verify_response(resp):
                ...
    """

    def __init__(
        self,
        options: ClientOptions,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if options.SIGN_ALGORITHM != SignAlgorithm.SHA256_WITH_RSA.value:
            raise ValueError(f"Unsupported sign algorithm: {options.SIGN_ALGORITHM}")
        self.options = options
        if options.LOG_LEVEL:
            logging.getLogger("tenpay_business").setLevel(options.LOG_LEVEL)
        self.credentials = Credentials.from_options(options)
        self._http = client(
            base_url=options.ENDPOINT.rstrip("/"),
            timeout_sec=options.TIMEOUT_SEC,
            transport=transport,
        )

    async def __aenter__(self) -> "TenpayBusinessClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ---- signing ----
    def _authorization(self, body: str) -> str:
        timestamp = str(int(time.time()))
        nonce = secrets.token_hex(16)
        plaintext = signature.build_plaintext(timestamp, nonce, body)
        return format_authorization(
            platform_id=self.credentials.platform_id,
            serial_number=self.credentials.serial_number,
            nonce=nonce,
            timestamp=timestamp,
            signature=signature.sign(plaintext, self.credentials.private_key),
            algorithm=self.options.SIGN_ALGORITHM,
        )

    def create_request(
        self,
        method: str,
        path: str,
        request: Optional[TenpayBusinessRequest] = None,
        params: Optional[dict] = None,
    ) -> httpx.Request:
        method = method.upper()
        body = "" if request is None or method in SIMPLE_METHODS else request.to_body()

        headers = {
            "Accept": "application/json",
            AUTHORIZATION_HEADER: self._authorization(body),
        }
        if body:
            headers["Content-Type"] = "application/json"

        if request is not None and request.tbep_encryption is not None:
            enc = request.tbep_encryption
            if enc.algorithm is None:
                enc.algorithm = EncryptionAlgorithm.RSA_OAEP_WITH_SM4_128_CBC.value
            headers[ENCRYPTION_HEADER] = format_encryption(
                encrypted_key=enc.encrypted_key,
                iv=enc.iv,
                serial_number=enc.serial_number,
                algorithm=enc.algorithm,
            )

        timeout = httpx.USE_CLIENT_DEFAULT
        if request is not None and request.timeout is not None:
            timeout = request.timeout

        return self._http.build_request(
            method,
            path,
            params=params,
            content=body.encode("utf-8") if body else None,
            headers=headers,
            timeout=timeout,
        )

    # ---- transport ----
    async def _send(self, http_request: httpx.Request) -> httpx.Response:
        return await self._http.send(http_request)

    async def send_request(
        self,
        method: str,
        path: str,
        request: Optional[TenpayBusinessRequest] = None,
        response_model: Type[TResponse] = TenpayBusinessResponse,
        params: Optional[dict] = None,
    ) -> TResponse:
        http_request = self.create_request(method, path, request, params=params)
        logger.debug("TBEP %s %s", http_request.method, http_request.url)
        try:
            resp = await retry_policy(max_attempts=self.options.RETRY_MAX)(self._send)(http_request)
        except httpx.HTTPError as e:
            logger.error("TBEP request %s %s failed: %s", http_request.method, http_request.url, e)
            raise TenpayBusinessRequestError(str(e), {"url": str(http_request.url)}) from e
        logger.debug("TBEP %s %s -> %s", http_request.method, http_request.url, resp.status_code)
        return self._wrap_response(resp, response_model)

    def _wrap_response(self, resp: httpx.Response, response_model: Type[TResponse]) -> TResponse:
        try:
            js = resp.json() if resp.content else {}
        except (json.JSONDecodeError, UnicodeDecodeError):
            js = {}
        if not isinstance(js, dict):
            js = {}

        try:
            result = response_model.model_validate(js)
        except ValidationError as e:
            # error bodies rarely satisfy endpoint models; keep the fields as sent
            logger.warning(
                "TBEP response (HTTP %s) does not match %s: %d validation error(s)",
                resp.status_code, response_model.__name__, e.error_count(),
            )
            result = response_model.model_construct(**js)
        result.raw_status = resp.status_code
        result.raw_headers = {k.lower(): v for k, v in resp.headers.items()}
        result.raw_body = resp.content

        enc_text = resp.headers.get(ENCRYPTION_HEADER)
        if enc_text:
            try:
                enc = parse_encryption(enc_text)
            except MalformedHeaderError as e:
                logger.warning("Ignoring unreadable %s header: %s", ENCRYPTION_HEADER, e.message)
            else:
                result.tbep_encryption = ResponseEncryption(
                    platform_id=enc.platform_id,
                    encrypted_key=enc.encrypted_key,
                    iv=enc.iv,
                    serial_number=enc.serial_number,
                    algorithm=enc.algorithm,
                )
        return result

    # ---- verification & encryption ----
    def verify_response(self, response: TenpayBusinessResponse) -> VerificationResult:
        return verify_signature(
            self.credentials,
            response.raw_headers.get(AUTHORIZATION_HEADER.lower()),
            response.raw_body,
        )

    def verify_event(self, authorization: Optional[str], body) -> VerificationResult:
        return verify_signature(self.credentials, authorization, body)

    def new_request_encryption(self, serial_number: Optional[str] = None) -> FieldCipher:
        return generate_request_encryption(self.credentials, serial_number)

    def open_response_encryption(self, response: TenpayBusinessResponse) -> FieldCipher:
        if response.tbep_encryption is None:
            raise MalformedHeaderError(f"Response has no `{ENCRYPTION_HEADER}` header.")
        return open_response_encryption(self.credentials, response.tbep_encryption)
