import pytest
from Crypto.PublicKey import RSA

from tenpay_business.credentials import Credentials
from tenpay_business.settings import ClientOptions
from tenpay_business.tbep import signature
from tenpay_business.tbep.headers import format_attributes

PLATFORM_ID = "1100000001"
PLATFORM_SN = "PLATFORM_SN"
TBEP_SN = "SN1"


@pytest.fixture(scope="session")
def platform_key():
    """Merchant platform certificate key pair."""
    return RSA.generate(2048)


@pytest.fixture(scope="session")
def tbep_key():
    """TBEP platform certificate key pair (signs responses)."""
    return RSA.generate(2048)


@pytest.fixture(scope="session")
def platform_private_pem(platform_key):
    return platform_key.export_key().decode()


@pytest.fixture(scope="session")
def tbep_public_pem(tbep_key):
    return tbep_key.publickey().export_key().decode()


@pytest.fixture
def credentials(platform_private_pem, tbep_public_pem):
    return Credentials(
        platform_id=PLATFORM_ID,
        platform_serial_number=PLATFORM_SN,
        platform_private_key=platform_private_pem,
        tbep_public_keys={TBEP_SN: tbep_public_pem},
    )


@pytest.fixture
def options(platform_private_pem, tbep_public_pem):
    return ClientOptions(
        ENDPOINT="https://tbep.test",
        RETRY_MAX=1,
        PLATFORM_ID=PLATFORM_ID,
        PLATFORM_CERTIFICATE_SERIAL_NUMBER=PLATFORM_SN,
        PLATFORM_CERTIFICATE_PRIVATE_KEY=platform_private_pem,
        TBEP_CERTIFICATE_SERIAL_NUMBER=TBEP_SN,
        TBEP_CERTIFICATE_PUBLIC_KEY=tbep_public_pem,
    )


@pytest.fixture
def tbep_authorization(tbep_key):
    """Builds a TBEP-Authorization header the way the platform signs responses."""

    def build(body, timestamp="1610000000", nonce="abc123", serial_number=TBEP_SN,
              algorithm="SHA256-RSA2048", key=None):
        sig = signature.sign(signature.build_plaintext(timestamp, nonce, body), key or tbep_key)
        return format_attributes({
            "timestamp": timestamp,
            "nonce": nonce,
            "signature": sig,
            "tbep_serial_number": serial_number,
            "signature_algorithm": algorithm,
        })

    return build
