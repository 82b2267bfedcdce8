"""
Core types for the ledger replay engine.

This module provides the foundational data structures used by the store and
the transaction engine:
1. Constants: decimal precision and identifier bounds
2. Enums: TransactionKind, ApplyResult, IgnoreReason
3. Exceptions: LedgerError and the malformed-input hierarchy
4. Data structures: TransactionEvent, Account, LedgerEntry, AccountSnapshot, Outcome

TransactionEvent validates itself on construction, so anything that reaches
the engine is already well-formed. Business rules live in engine.py.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN, InvalidOperation, getcontext
from enum import Enum
from typing import Any, Optional


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Replay requires deterministic Decimal arithmetic. The global context is
# configured at module load time.
#
# PRECONDITION: No other code should modify the global Decimal context.
#
_REPLAY_DECIMAL_CONTEXT = getcontext()
_REPLAY_DECIMAL_CONTEXT.prec = 50
_REPLAY_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

# Fractional digits kept for every monetary amount.
AMOUNT_DECIMAL_PLACES = 4
AMOUNT_QUANTUM = Decimal(10) ** -AMOUNT_DECIMAL_PLACES

ZERO = Decimal("0")

# Client ids are unsigned 16-bit, transaction ids unsigned 32-bit.
MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TX_ID = 2 ** 32 - 1


# ============================================================================
# ENUMS
# ============================================================================

class TransactionKind(Enum):
    """Kind of an incoming transaction event. Values match the CSV ``type`` column."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        """True for kinds that move funds and therefore require an amount."""
        return self in (TransactionKind.DEPOSIT, TransactionKind.WITHDRAWAL)


class ApplyResult(Enum):
    """
    Outcome of applying one event.

    APPLIED: The event changed ledger state.
    IGNORED: The event broke a business rule and was dropped. Replay continues.
    """
    APPLIED = "applied"
    IGNORED = "ignored"


class IgnoreReason(Enum):
    """Why an event was dropped."""
    ACCOUNT_NOT_FOUND = "account_not_found"
    ACCOUNT_LOCKED = "account_locked"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    CLIENT_MISMATCH = "client_mismatch"
    ALREADY_DISPUTED = "already_disputed"
    NOT_DISPUTED = "not_disputed"
    CHARGED_BACK = "charged_back"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger replay errors."""
    pass


class MalformedRecord(LedgerError):
    """
    Raised when an input record cannot be turned into a TransactionEvent.

    Aborts the whole run. ``line_number`` and ``row`` are filled in by the
    ingestion reader when the failure comes from a file.
    """

    def __init__(self, message: str, line_number: Optional[int] = None, row: Any = None):
        super().__init__(message)
        self.message = message
        self.line_number = line_number
        self.row = row

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}"


class MissingAmount(MalformedRecord):
    """Raised when a deposit or withdrawal has no amount."""
    pass


class InvalidAmount(MalformedRecord):
    """Raised when an amount is unparseable, not positive, or given to a kind that takes none."""
    pass


# ============================================================================
# AMOUNTS
# ============================================================================

def to_amount(value: Any) -> Decimal:
    """
    Convert a value to a monetary Decimal with AMOUNT_DECIMAL_PLACES digits.

    Strings and ints are converted exactly before quantizing. Floats go
    through ``str()`` so that 1.1 becomes Decimal("1.1000"), not its binary
    expansion.

    Raises:
        InvalidAmount: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise InvalidAmount(f"Amount must be numeric, got {value!r}")
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmount(f"Amount is not a number: {value!r}") from None
    if not value.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value}")
    try:
        return value.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_EVEN)
    except InvalidOperation:
        raise InvalidAmount(f"Amount exceeds supported precision: {value}") from None


def format_amount(value: Decimal) -> str:
    """Render an amount with exactly AMOUNT_DECIMAL_PLACES fractional digits."""
    return f"{value.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_EVEN):f}"


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class TransactionEvent:
    """
    A single parsed record from the input stream.

    Attributes:
        kind: What the event does.
        client_id: Client the event targets (unsigned 16-bit).
        tx_id: For deposit/withdrawal, the new transaction's id. For
            dispute/resolve/chargeback, the id of the transaction it refers to.
        amount: Required and positive for deposit/withdrawal, None otherwise.

    All fields are validated in __post_init__; the amount is quantized to
    AMOUNT_DECIMAL_PLACES.
    """
    kind: TransactionKind
    client_id: int
    tx_id: int
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if not isinstance(self.kind, TransactionKind):
            raise MalformedRecord(f"Unknown transaction kind: {self.kind!r}")
        if isinstance(self.client_id, bool) or not isinstance(self.client_id, int):
            raise MalformedRecord(f"Client id must be an integer, got {self.client_id!r}")
        if not 0 <= self.client_id <= MAX_CLIENT_ID:
            raise MalformedRecord(f"Client id out of range: {self.client_id}")
        if isinstance(self.tx_id, bool) or not isinstance(self.tx_id, int):
            raise MalformedRecord(f"Transaction id must be an integer, got {self.tx_id!r}")
        if not 0 <= self.tx_id <= MAX_TX_ID:
            raise MalformedRecord(f"Transaction id out of range: {self.tx_id}")

        if self.kind.carries_amount:
            if self.amount is None:
                raise MissingAmount(f"{self.kind.value} {self.tx_id} has no amount")
            amount = to_amount(self.amount)
            if amount <= ZERO:
                raise InvalidAmount(f"{self.kind.value} {self.tx_id} amount must be positive, got {amount}")
            object.__setattr__(self, 'amount', amount)
        elif self.amount is not None:
            raise InvalidAmount(f"{self.kind.value} {self.tx_id} does not take an amount")

    def __repr__(self) -> str:
        amount = f" {self.amount}" if self.amount is not None else ""
        return f"{self.kind.value}(client={self.client_id}, tx={self.tx_id}{amount})"


@dataclass(slots=True)
class Account:
    """
    Balances of one client.

    Invariant: total == available + held. Only TransactionEngine mutates
    accounts, and every rule updates the fields in pairs that keep it.
    """
    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    total: Decimal = ZERO
    locked: bool = False

    def is_balanced(self) -> bool:
        return self.total == self.available + self.held

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked,
        )


@dataclass(slots=True)
class LedgerEntry:
    """
    A retained deposit or withdrawal that a later dispute may refer to.

    An entry is Clean (disputed=False), Disputed (disputed=True), or charged
    back (disputed=True, charged_back=True). Charged back is terminal.
    """
    tx_id: int
    client_id: int
    amount: Decimal
    kind: TransactionKind
    disputed: bool = False
    charged_back: bool = False

    @classmethod
    def from_event(cls, event: TransactionEvent) -> LedgerEntry:
        if not event.kind.carries_amount:
            raise ValueError(f"Only deposits and withdrawals are retained, got {event.kind.value}")
        return cls(
            tx_id=event.tx_id,
            client_id=event.client_id,
            amount=event.amount,
            kind=event.kind,
        )


@dataclass(frozen=True, slots=True)
class AccountSnapshot:
    """Immutable copy of an Account, handed to report writers."""
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


@dataclass(frozen=True, slots=True)
class Outcome:
    """
    Result of TransactionEngine.apply().

    ``reason`` is set exactly when ``result`` is IGNORED.
    """
    result: ApplyResult
    reason: Optional[IgnoreReason] = None

    def __post_init__(self):
        if (self.result is ApplyResult.IGNORED) != (self.reason is not None):
            raise ValueError("Outcome reason must be given exactly for IGNORED results")

    @property
    def applied(self) -> bool:
        return self.result is ApplyResult.APPLIED

    @classmethod
    def ignored(cls, reason: IgnoreReason) -> Outcome:
        return cls(ApplyResult.IGNORED, reason)

    def __repr__(self) -> str:
        if self.reason is None:
            return f"Outcome({self.result.value})"
        return f"Outcome({self.result.value}: {self.reason.value})"


APPLIED = Outcome(ApplyResult.APPLIED)
