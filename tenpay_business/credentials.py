from types import MappingProxyType
from typing import Mapping, Optional

from Crypto.PublicKey import RSA

from .errors import SigningError, UnknownKeyError
from .utils.security import load_rsa_key


class Credentials:
    """
    Key material for one client, built once and read-only afterwards:
      - the merchant-platform certificate (private key + serial number) used
        to sign outbound requests and unwrap response encryption keys;
      - TBEP platform certificates (serial number -> public key) used to verify
        inbound signatures and wrap request encryption keys.
    """

    __slots__ = ("_platform_id", "_serial_number", "_private_key", "_public_keys")

    def __init__(
        self,
        platform_id: str,
        platform_serial_number: str,
        platform_private_key: str,
        tbep_public_keys: Optional[Mapping[str, str]] = None,
    ):
        try:
            private_key = load_rsa_key(platform_private_key)
        except (ValueError, TypeError, IndexError) as e:
            raise SigningError(f"Platform certificate private key is malformed: {e}") from e
        if not private_key.has_private():
            raise SigningError("Platform certificate key has no private part.")

        public_keys = {}
        for serial_number, key_text in (tbep_public_keys or {}).items():
            try:
                public_keys[serial_number] = load_rsa_key(key_text)
            except (ValueError, TypeError, IndexError) as e:
                raise ValueError(f"TBEP public key for serial number {serial_number!r} is malformed: {e}") from e

        object.__setattr__(self, "_platform_id", platform_id)
        object.__setattr__(self, "_serial_number", platform_serial_number)
        object.__setattr__(self, "_private_key", private_key)
        object.__setattr__(self, "_public_keys", MappingProxyType(public_keys))

    def __setattr__(self, name, value):
        raise AttributeError("Credentials are immutable")

    def __delattr__(self, name):
        raise AttributeError("Credentials are immutable")

    @classmethod
    def from_options(cls, options) -> "Credentials":
        public_keys = dict(options.TBEP_CERTIFICATES or {})
        if options.TBEP_CERTIFICATE_SERIAL_NUMBER and options.TBEP_CERTIFICATE_PUBLIC_KEY:
            public_keys[options.TBEP_CERTIFICATE_SERIAL_NUMBER] = options.TBEP_CERTIFICATE_PUBLIC_KEY
        return cls(
            platform_id=options.PLATFORM_ID,
            platform_serial_number=options.PLATFORM_CERTIFICATE_SERIAL_NUMBER,
            platform_private_key=options.PLATFORM_CERTIFICATE_PRIVATE_KEY,
            tbep_public_keys=public_keys,
        )

    @property
    def platform_id(self) -> str:
        return self._platform_id

    @property
    def serial_number(self) -> str:
        return self._serial_number

    @property
    def private_key(self) -> RSA.RsaKey:
        return self._private_key

    @property
    def serial_numbers(self):
        return tuple(self._public_keys)

    def public_key_for(self, serial_number: Optional[str]) -> RSA.RsaKey:
        key = self._public_keys.get(serial_number) if serial_number else None
        if key is None:
            raise UnknownKeyError(
                "There is no TBEP public key matched the serial number.",
                {"serial_number": serial_number},
            )
        return key

    def default_serial_number(self) -> str:
        """First registered TBEP serial number, used when the caller does not pick one."""
        if not self._public_keys:
            raise UnknownKeyError("There is no TBEP public key or serial number.")
        return next(iter(self._public_keys))
