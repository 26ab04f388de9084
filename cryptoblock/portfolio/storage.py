"""
Portfolio Storage Module for CryptoBlock

Persists portfolio entries and their transactions to a JSON file.
"""

import json
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional


class TransactionType(str, Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass
class Transaction:
    """A single buy or sell of one coin."""
    type: TransactionType
    amount: float
    price: float
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds")
    )

    @property
    def signed_amount(self) -> float:
        return self.amount if self.type == TransactionType.BUY else -self.amount

    def to_dict(self) -> dict:
        data = asdict(self)
        data["type"] = self.type.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        return cls(
            type=TransactionType(data["type"]),
            amount=float(data["amount"]),
            price=float(data["price"]),
            timestamp=data.get("timestamp", ""),
        )


@dataclass
class PortfolioEntry:
    """One coin tracked in the portfolio."""
    coin_id: int
    transactions: List[Transaction] = field(default_factory=list)
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds")
    )

    @property
    def holdings(self) -> float:
        return sum(t.signed_amount for t in self.transactions)

    @property
    def last_activity(self) -> str:
        if self.transactions:
            return self.transactions[-1].timestamp
        return self.created_at

    def to_dict(self) -> dict:
        return {
            "coin_id": self.coin_id,
            "created_at": self.created_at,
            "transactions": [t.to_dict() for t in self.transactions],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PortfolioEntry":
        return cls(
            coin_id=int(data["coin_id"]),
            transactions=[Transaction.from_dict(t) for t in data.get("transactions", [])],
            created_at=data.get("created_at", ""),
        )


class PortfolioError(Exception):
    """Base class for portfolio errors."""


class PortfolioStorageError(PortfolioError):
    """Raised when the portfolio file cannot be read or written."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Portfolio storage error for '{path}': {reason}")
        self.path = path


class PortfolioStorage:
    """
    JSON file storage for portfolio entries.

    Storage location: <data dir>/portfolio.json
    """

    def __init__(self, storage_path: Optional[Path] = None):
        self.storage_path = storage_path

    def load(self) -> Dict[int, PortfolioEntry]:
        """Load entries from disk. A missing file is an empty portfolio."""
        if self.storage_path is None or not self.storage_path.exists():
            return {}

        try:
            data = json.loads(self.storage_path.read_text(encoding="utf-8"))
            entries = [PortfolioEntry.from_dict(item) for item in data.get("entries", [])]
        except (json.JSONDecodeError, OSError) as e:
            raise PortfolioStorageError(self.storage_path, str(e)) from e
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise PortfolioStorageError(self.storage_path, f"malformed entry ({e})") from e

        return {entry.coin_id: entry for entry in entries}

    def save(self, entries: Dict[int, PortfolioEntry]) -> None:
        if self.storage_path is None:
            return

        data = {
            "entries": [entry.to_dict() for entry in entries.values()],
            "updated_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        }
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            self.storage_path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise PortfolioStorageError(self.storage_path, str(e)) from e
