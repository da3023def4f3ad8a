"""
Chain space types and utilities.

A space is a family of networks that share one address format and one
native-amount encoding. Two families are supported out of the box:
- Conflux Core (base32 ``cfx:`` addresses, ``cfx_*`` RPC)
- Conflux eSpace (EVM hex addresses, ``eth_*`` RPC)

Custom spaces can be declared for other families as long as they use one of
the known address formats.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Optional, Union

from eth_utils import is_hex_address, to_checksum_address

CORE_SPACE = "core"
ESPACE_SPACE = "espace"

# Conflux base32 excludes i, l, o and q
_BASE32_ADDRESS_RE = re.compile(
    r"^(cfx|cfxtest|net\d+):(type\.[a-z]+:)?[abcdefghjkmnprstuvwxyz0-9]{42}$",
    re.IGNORECASE,
)

# Enough precision for uint256 amounts
_AMOUNT_PRECISION = 80


class AddressFormat(str, Enum):
    """How accounts are written within a space."""

    HEX = "hex"         # 0x-prefixed 20 byte EVM address
    BASE32 = "base32"   # CIP-37 network-prefixed address


@dataclass(frozen=True)
class ChainInfo:
    """Static metadata for the chain a wallet variant requires."""

    chain_id: int
    name: str
    native_symbol: str
    rpc_url: Optional[str] = None
    explorer_url: Optional[str] = None

    @property
    def hex_chain_id(self) -> str:
        return hex(self.chain_id)

    def to_dict(self) -> dict:
        return {
            "chainId": self.chain_id,
            "name": self.name,
            "nativeSymbol": self.native_symbol,
            "rpcUrl": self.rpc_url,
            "explorerUrl": self.explorer_url,
        }


@dataclass(frozen=True)
class Space:
    """A chain family with its own address and amount encoding."""

    name: str
    label: str
    native_symbol: str
    address_format: AddressFormat = AddressFormat.HEX
    decimals: int = 18

    def is_valid_address(self, address: str) -> bool:
        if not address or not isinstance(address, str):
            return False
        if self.address_format == AddressFormat.BASE32:
            return bool(_BASE32_ADDRESS_RE.fullmatch(address))
        return is_hex_address(address)

    def normalize_address(self, address: str) -> str:
        """Return the canonical spelling of an address in this space.

        Raises:
            ValueError: If the address does not belong to this space.
        """
        if not self.is_valid_address(address):
            raise ValueError(f"Invalid {self.label} address: {address!r}")
        if self.address_format == AddressFormat.BASE32:
            return address.lower()
        return to_checksum_address(address)

    def to_base_units(self, amount: Union[str, int, Decimal]) -> int:
        """
        Encode a human readable amount (e.g. ``"1.5"``) to integer base units.

        Raises:
            ValueError: If the amount is not a non-negative number or has more
                fractional digits than the space supports.
        """
        with localcontext() as ctx:
            ctx.prec = _AMOUNT_PRECISION
            try:
                value = Decimal(str(amount).strip())
            except InvalidOperation:
                raise ValueError(f"Invalid amount: {amount!r}") from None

            if not value.is_finite() or value < 0:
                raise ValueError(f"Invalid amount: {amount!r}")

            scaled = value.scaleb(self.decimals)
            if scaled != scaled.to_integral_value():
                raise ValueError(
                    f"Amount {amount!r} has more than {self.decimals} decimal places"
                )
            return int(scaled)

    def from_base_units(self, value: int) -> Decimal:
        """Decode integer base units to a human readable ``Decimal``."""
        with localcontext() as ctx:
            ctx.prec = _AMOUNT_PRECISION
            amount = Decimal(int(value)).scaleb(-self.decimals).normalize()
            # normalize() turns 100 into 1E+2
            if amount.as_tuple().exponent > 0:
                amount = amount.quantize(Decimal(1))
            return amount


def parse_quantity(value: Union[str, int, None]) -> Optional[int]:
    """Parse a JSON-RPC quantity (``"0x1a"``, ``"26"`` or ``26``)."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text)


def normalize_chain_id(value: Union[str, int]) -> str:
    """Render a chain id the way sessions store it: a decimal string.

    Examples:
        >>> normalize_chain_id("0x406")
        '1030'
        >>> normalize_chain_id(7)
        '7'
    """
    parsed = parse_quantity(value)
    if parsed is None:
        raise ValueError(f"Invalid chain id: {value!r}")
    return str(parsed)


__all__ = [
    "CORE_SPACE",
    "ESPACE_SPACE",
    "AddressFormat",
    "ChainInfo",
    "Space",
    "parse_quantity",
    "normalize_chain_id",
]
