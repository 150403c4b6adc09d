"""
Tests for call encoding and amount parsing.
"""
from decimal import Decimal

import pytest
from eth_abi import decode

from launchpad_sdk.contracts import (
    DEPLOY_TOKEN, RECORD_DEPLOY, TRANSFER, UINT256_MAX, checksum, encode_call, encode_deploy_token,
    encode_mint, encode_record_deploy, encode_transfer, event_topic, function_selector,
    parse_amount
)
from launchpad_sdk.exceptions import ValidationError
from tests.test_helpers import RECIPIENT, TOKEN_ADDRESS


def test_well_known_selectors():
    assert function_selector(TRANSFER).hex() == "a9059cbb"
    assert function_selector("approve(address,uint256)").hex() == "095ea7b3"
    assert function_selector("balanceOf(address)").hex() == "70a08231"
    assert event_topic("Transfer(address,address,uint256)") == \
        "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"


def test_encode_transfer():
    data = encode_transfer(RECIPIENT.lower(), 10)
    assert data.startswith("0xa9059cbb")
    to, amount = decode(["address", "uint256"], bytes.fromhex(data[10:]))
    assert to.lower() == RECIPIENT.lower()
    assert amount == 10


def test_encode_deploy_token_has_zero_supply():
    data = encode_deploy_token("Launch", "LCH")
    assert data[2:10] == function_selector(DEPLOY_TOKEN).hex()
    assert decode(["string", "string", "uint256"], bytes.fromhex(data[10:])) == ("Launch", "LCH", 0)


def test_encode_record_deploy():
    data = encode_record_deploy(TOKEN_ADDRESS, "Launch", "LCH", 5)
    assert data[2:10] == function_selector(RECORD_DEPLOY).hex()
    token, name, symbol, supply = decode(["address", "string", "string", "uint256"], bytes.fromhex(data[10:]))
    assert (token.lower(), name, symbol, supply) == (TOKEN_ADDRESS.lower(), "Launch", "LCH", 5)


def test_encode_call_argument_count():
    with pytest.raises(ValueError):
        encode_call(TRANSFER, [RECIPIENT])


def test_checksum():
    assert checksum(TOKEN_ADDRESS.lower()) == TOKEN_ADDRESS
    with pytest.raises(ValidationError):
        checksum("0x1234")
    with pytest.raises(ValidationError):
        encode_transfer("nope", 1)


@pytest.mark.parametrize("amount,expected", [
    ("1", 10**18),
    ("0.5", 5 * 10**17),
    (" 1000 ", 1000 * 10**18),
    ("0.000000000000000001", 1),
    (2, 2 * 10**18),
    (Decimal("1.25"), 125 * 10**16),
])
def test_parse_amount(amount, expected):
    assert parse_amount(amount) == expected


@pytest.mark.parametrize("amount", ["", "abc", "-1", "0", "1e-19", "NaN", "Infinity", None])
def test_parse_amount_rejects(amount):
    with pytest.raises(ValidationError):
        parse_amount(amount)


def test_parse_amount_zero_allowed():
    assert parse_amount("0", allow_zero=True) == 0
    with pytest.raises(ValidationError):
        parse_amount("-0.1", allow_zero=True)


def test_parse_amount_accepts_uint256_max():
    digits = str(UINT256_MAX)
    assert parse_amount(digits[:-18] + "." + digits[-18:]) == UINT256_MAX


@pytest.mark.parametrize("amount", [
    "1" + "0" * 60,
    "1e1000000",
    str(UINT256_MAX),
])
def test_parse_amount_rejects_values_beyond_uint256(amount):
    with pytest.raises(ValidationError, match="uint256"):
        parse_amount(amount, allow_zero=True)


def test_parse_amount_long_input_is_not_rounded():
    # 92 significant digits; the trailing 1 is past the 18th decimal place
    with pytest.raises(ValidationError, match="decimal places"):
        parse_amount("1" + "0" * 50 + "." + "0" * 40 + "1")


def test_encoding_errors_become_validation_errors():
    with pytest.raises(ValidationError, match="mint"):
        encode_mint(RECIPIENT, UINT256_MAX + 1)
