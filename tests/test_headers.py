"""
Tests for the TBEP header attribute codec.

Run with: python -m pytest tests/ -v
"""
import pytest

from tenpay_business.errors import MalformedHeaderError
from tenpay_business.tbep.headers import (
    format_authorization,
    format_encryption,
    parse_attributes,
    parse_authorization,
    parse_encryption,
)


class TestParseAttributes:

    def test_quoted_and_bare_values(self):
        attrs = parse_attributes('timestamp="1610000000", nonce=abc123 ,algorithm = "X"')
        assert attrs == {"timestamp": "1610000000", "nonce": "abc123", "algorithm": "X"}

    def test_base64_padding_is_kept(self):
        attrs = parse_attributes('signature="YWJjZA==",iv="MTIzNA=="')
        assert attrs["signature"] == "YWJjZA=="
        assert attrs["iv"] == "MTIzNA=="

    def test_item_without_equals_maps_to_none(self):
        assert parse_attributes('flag,nonce="n"') == {"flag": None, "nonce": "n"}

    def test_duplicate_attribute_rejected(self):
        with pytest.raises(MalformedHeaderError) as exc:
            parse_attributes('nonce="a",nonce="b"')
        assert exc.value.details["attribute"] == "nonce"

    def test_empty_name_rejected(self):
        with pytest.raises(MalformedHeaderError):
            parse_attributes('="value"')

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_header_rejected(self, text):
        with pytest.raises(MalformedHeaderError):
            parse_attributes(text)


class TestAuthorizationHeader:

    HEADER = (
        'timestamp="1610000000",nonce="abc123",signature="c2ln",'
        'tbep_serial_number="SN1",signature_algorithm="SHA256-RSA2048"'
    )

    def test_parse(self):
        header = parse_authorization(self.HEADER)
        assert header.timestamp == "1610000000"
        assert header.nonce == "abc123"
        assert header.signature == "c2ln"
        assert header.serial_number == "SN1"
        assert header.algorithm == "SHA256-RSA2048"

    def test_missing_signature(self):
        text = self.HEADER.replace('signature="c2ln",', "")
        with pytest.raises(MalformedHeaderError) as exc:
            parse_authorization(text)
        assert exc.value.details["missing"] == ["signature"]

    def test_empty_value_counts_as_missing(self):
        with pytest.raises(MalformedHeaderError):
            parse_authorization(self.HEADER.replace('nonce="abc123"', 'nonce=""'))

    def test_absent_header_message(self):
        with pytest.raises(MalformedHeaderError) as exc:
            parse_authorization(None)
        assert "TBEP-Authorization" in exc.value.message

    def test_format_is_parseable_by_generic_codec(self):
        text = format_authorization("P1", "PSN", "n", "1", "c2lnbg==", "SHA256-RSA2048")
        assert text == (
            'platform_id="P1",platform_serial_number="PSN",nonce="n",timestamp="1",'
            'signature="c2lnbg==",signature_algorithm="SHA256-RSA2048"'
        )
        assert parse_attributes(text)["signature"] == "c2lnbg=="


class TestEncryptionHeader:

    def test_parse_response_header(self):
        enc = parse_encryption(
            'platform_id="P1",enc_key="a2V5",iv="aXY=",'
            'platform_serial_number="PSN",algorithm="RSA_OAEP_WITH_SM4_128_CBC"'
        )
        assert enc.platform_id == "P1"
        assert enc.encrypted_key == "a2V5"
        assert enc.iv == "aXY="
        assert enc.serial_number == "PSN"
        assert enc.algorithm == "RSA_OAEP_WITH_SM4_128_CBC"

    def test_parse_request_header(self):
        text = format_encryption("a2V5", "aXY=", "SN1", "RSA_OAEP_WITH_SM4_128_CBC")
        assert text == 'enc_key="a2V5",iv="aXY=",tbep_serial_number="SN1",algorithm="RSA_OAEP_WITH_SM4_128_CBC"'
        enc = parse_encryption(text)
        assert enc.serial_number == "SN1"
        assert enc.platform_id is None

    def test_missing_serial_number(self):
        with pytest.raises(MalformedHeaderError):
            parse_encryption('enc_key="a2V5",iv="aXY=",algorithm="X"')

    def test_missing_iv(self):
        with pytest.raises(MalformedHeaderError) as exc:
            parse_encryption('enc_key="a2V5",platform_serial_number="PSN",algorithm="X"')
        assert exc.value.details["missing"] == ["iv"]
