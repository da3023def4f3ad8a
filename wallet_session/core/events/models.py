"""
Change Event Models

Events broadcast by the session manager whenever the connection, account,
chain, balance or transaction state changes.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Optional


class ChangeEventType(str, Enum):
    """Tag for each change event variant."""

    CONNECTION_ESTABLISHED = "connection_established"
    CONNECTION_LOST = "connection_lost"
    ACCOUNT_CHANGED = "account_changed"
    CHAIN_CHANGED = "chain_changed"
    BALANCE_UPDATED = "balance_updated"
    BLOCK_NUMBER_UPDATED = "block_number_updated"
    TRANSACTION_SENT = "transaction_sent"
    TRANSACTION_CONFIRMED = "transaction_confirmed"
    ERROR_RAISED = "error_raised"


@dataclass(frozen=True)
class ChangeEvent:
    """Base class for change events."""

    type: ClassVar[ChangeEventType]

    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
        compare=False,
        kw_only=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            key: value
            for key, value in self.__dict__.items()
            if key != "timestamp"
        }
        for key, value in payload.items():
            if isinstance(value, Decimal):
                payload[key] = str(value)
        return {
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            **payload,
        }


@dataclass(frozen=True)
class ConnectionEstablished(ChangeEvent):
    type: ClassVar[ChangeEventType] = ChangeEventType.CONNECTION_ESTABLISHED

    account: str
    chain_id: str


@dataclass(frozen=True)
class ConnectionLost(ChangeEvent):
    type: ClassVar[ChangeEventType] = ChangeEventType.CONNECTION_LOST


@dataclass(frozen=True)
class AccountChanged(ChangeEvent):
    type: ClassVar[ChangeEventType] = ChangeEventType.ACCOUNT_CHANGED

    account: str


@dataclass(frozen=True)
class ChainChanged(ChangeEvent):
    type: ClassVar[ChangeEventType] = ChangeEventType.CHAIN_CHANGED

    chain_id: str


@dataclass(frozen=True)
class BalanceUpdated(ChangeEvent):
    type: ClassVar[ChangeEventType] = ChangeEventType.BALANCE_UPDATED

    amount: Decimal


@dataclass(frozen=True)
class BlockNumberUpdated(ChangeEvent):
    type: ClassVar[ChangeEventType] = ChangeEventType.BLOCK_NUMBER_UPDATED

    block_number: int


@dataclass(frozen=True)
class TransactionSent(ChangeEvent):
    type: ClassVar[ChangeEventType] = ChangeEventType.TRANSACTION_SENT

    tx_hash: str


@dataclass(frozen=True)
class TransactionConfirmed(ChangeEvent):
    type: ClassVar[ChangeEventType] = ChangeEventType.TRANSACTION_CONFIRMED

    tx_hash: str
    status: str
    block_number: Optional[int] = None


@dataclass(frozen=True)
class ErrorRaised(ChangeEvent):
    type: ClassVar[ChangeEventType] = ChangeEventType.ERROR_RAISED

    kind: str
    message: str


ChangeHandler = Callable[[ChangeEvent], None]
