from typing import Optional
import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type


def client(
    base_url: str = "",
    timeout_sec: float = 15,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url, timeout=timeout_sec, transport=transport)


def retry_policy(max_attempts: int = 4):
    # only transport-level failures are retried; a signed request is resent unchanged
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
