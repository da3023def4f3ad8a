"""
Tests for chain spaces

Address validation, amount encoding and chain id normalization.
"""

from decimal import Decimal

import pytest

from wallet_session.core.registry import CORE, ESPACE
from wallet_session.core.spaces import ChainInfo, normalize_chain_id, parse_quantity


CORE_ADDRESS = "cfx:aak2rra2njvd77ezwjvx04kkds9fzagfe6ku8scz91"
HEX_ADDRESS = "0x" + "beef" * 10


# =============================================================================
# Address Tests
# =============================================================================

class TestAddresses:
    """Tests for address validation per space."""

    def test_espace_accepts_hex_addresses(self):
        assert ESPACE.is_valid_address(HEX_ADDRESS)
        assert ESPACE.is_valid_address(HEX_ADDRESS.upper().replace("0X", "0x"))

    def test_espace_rejects_base32_and_garbage(self):
        assert not ESPACE.is_valid_address(CORE_ADDRESS)
        assert not ESPACE.is_valid_address("0x1234")
        assert not ESPACE.is_valid_address("")
        assert not ESPACE.is_valid_address(None)

    def test_core_accepts_base32_addresses(self):
        assert CORE.is_valid_address(CORE_ADDRESS)
        assert CORE.is_valid_address(CORE_ADDRESS.upper())
        assert CORE.is_valid_address("cfxtest:aak2rra2njvd77ezwjvx04kkds9fzagfe6ku8scz91")
        assert CORE.is_valid_address("cfx:type.user:aak2rra2njvd77ezwjvx04kkds9fzagfe6ku8scz91")

    def test_core_rejects_hex_addresses(self):
        assert not CORE.is_valid_address(HEX_ADDRESS)
        assert not CORE.is_valid_address("cfx:short")

    def test_normalize_checksums_hex(self):
        normalized = ESPACE.normalize_address(HEX_ADDRESS)

        assert normalized.lower() == HEX_ADDRESS
        assert normalized != HEX_ADDRESS

    def test_normalize_lowercases_base32(self):
        assert CORE.normalize_address(CORE_ADDRESS.upper()) == CORE_ADDRESS

    def test_normalize_rejects_foreign_address(self):
        with pytest.raises(ValueError, match="Conflux Core"):
            CORE.normalize_address(HEX_ADDRESS)


# =============================================================================
# Amount Tests
# =============================================================================

class TestAmounts:
    """Tests for native amount encoding."""

    @pytest.mark.parametrize(
        "amount,expected",
        [
            ("1", 10**18),
            ("0.5", 5 * 10**17),
            ("0", 0),
            (" 2.25 ", 225 * 10**16),
            ("0.000000000000000001", 1),
            (3, 3 * 10**18),
        ],
    )
    def test_to_base_units(self, amount, expected):
        assert ESPACE.to_base_units(amount) == expected

    def test_large_amounts_keep_precision(self):
        assert ESPACE.to_base_units("123456789012345678901234.5") == 1234567890123456789012345 * 10**17

    @pytest.mark.parametrize("amount", ["abc", "-1", "NaN", "Infinity", ""])
    def test_invalid_amounts_rejected(self, amount):
        with pytest.raises(ValueError):
            ESPACE.to_base_units(amount)

    def test_too_many_decimals_rejected(self):
        with pytest.raises(ValueError, match="decimal places"):
            ESPACE.to_base_units("0.0000000000000000001")

    def test_from_base_units(self):
        assert ESPACE.from_base_units(10**18) == Decimal("1")
        assert ESPACE.from_base_units(15 * 10**17) == Decimal("1.5")
        assert ESPACE.from_base_units(0) == Decimal("0")

    def test_from_base_units_keeps_plain_notation(self):
        """Whole amounts render without an exponent."""
        assert str(ESPACE.from_base_units(100 * 10**18)) == "100"
        assert str(ESPACE.from_base_units(25 * 10**17)) == "2.5"


# =============================================================================
# Quantity and Chain Id Tests
# =============================================================================

class TestQuantities:
    """Tests for JSON-RPC quantity parsing."""

    def test_parse_quantity(self):
        assert parse_quantity("0x1a") == 26
        assert parse_quantity("0X1A") == 26
        assert parse_quantity("26") == 26
        assert parse_quantity(26) == 26
        assert parse_quantity(None) is None
        assert parse_quantity("") is None

    def test_normalize_chain_id(self):
        assert normalize_chain_id("0x406") == "1030"
        assert normalize_chain_id("1029") == "1029"
        assert normalize_chain_id(7) == "7"

    def test_normalize_chain_id_rejects_empty(self):
        with pytest.raises(ValueError):
            normalize_chain_id("")

    def test_chain_info(self):
        chain = ChainInfo(chain_id=1030, name="Conflux eSpace", native_symbol="CFX")

        assert chain.hex_chain_id == "0x406"
        assert chain.to_dict()["chainId"] == 1030
        assert chain.to_dict()["rpcUrl"] is None
