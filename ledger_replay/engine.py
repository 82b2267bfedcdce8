"""
engine.py - Transaction State Machine

TransactionEngine is the only code that mutates a LedgerStore. Each event is
applied in arrival order and produces an Outcome.

Entry states:
    Clean --dispute--> Disputed --resolve--> Clean
                       Disputed --chargeback--> Charged back (terminal)

A chargeback also moves the owning account from active to locked. Locked is
one-way; a locked account accepts nothing further, including another
chargeback.

Business rule violations never raise. They return Outcome(IGNORED, reason)
and the replay continues. Malformed input raises before it gets here (see
TransactionEvent.__post_init__ and ingest.py).
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional, TextIO, Tuple
import sys

from .core import (
    # Types
    TransactionEvent, TransactionKind, LedgerEntry, Account,
    Outcome, IgnoreReason, APPLIED,
)
from .store import LedgerStore


@dataclass
class ReplaySummary:
    """
    Counts collected by TransactionEngine.run().

    Attributes:
        applied: Events that changed state
        ignored: Events dropped by a business rule
        ignored_by_reason: Breakdown of ``ignored``
    """
    applied: int = 0
    ignored: int = 0
    ignored_by_reason: Counter = field(default_factory=Counter)

    @property
    def processed(self) -> int:
        return self.applied + self.ignored

    def record(self, outcome: Outcome) -> None:
        if outcome.applied:
            self.applied += 1
        else:
            self.ignored += 1
            self.ignored_by_reason[outcome.reason] += 1


class TransactionEngine:
    """
    Applies transaction events to a LedgerStore.

    Example:
        engine = TransactionEngine()
        engine.apply(TransactionEvent(TransactionKind.DEPOSIT, 1, 1, Decimal("20")))
        engine.apply(TransactionEvent(TransactionKind.DISPUTE, 1, 1))
        engine.store.get_account(1).held    # Decimal("20.0000")
    """

    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        verbose: bool = False,
        output: Optional[TextIO] = None,
    ):
        """
        Create an engine.

        Args:
            store: Store to mutate (a fresh one is created if not provided)
            verbose: Print one diagnostic line per event
            output: Stream for diagnostic lines (sys.stderr at print time if not provided)
        """
        self.store = store if store is not None else LedgerStore()
        self.verbose = verbose
        self.output = output
        self.summary = ReplaySummary()
        self._handlers: Dict[TransactionKind, Callable[[TransactionEvent], Outcome]] = {
            TransactionKind.DEPOSIT: self._handle_deposit,
            TransactionKind.WITHDRAWAL: self._handle_withdrawal,
            TransactionKind.DISPUTE: self._handle_dispute,
            TransactionKind.RESOLVE: self._handle_resolve,
            TransactionKind.CHARGEBACK: self._handle_chargeback,
        }

    # ========================================================================
    # ENTRY POINTS
    # ========================================================================

    def apply(self, event: TransactionEvent) -> Outcome:
        """
        Apply one event.

        Args:
            event: A validated TransactionEvent

        Returns:
            APPLIED if the store changed, otherwise Outcome(IGNORED, reason)
        """
        outcome = self._handlers[event.kind](event)
        self.summary.record(outcome)
        if self.verbose:
            self._print_outcome(event, outcome)
        return outcome

    def run(self, events: Iterable[TransactionEvent]) -> ReplaySummary:
        """
        Apply every event from ``events`` in order.

        The iterable is consumed lazily. A LedgerError raised by the source
        (malformed record) propagates and stops the run.

        Returns:
            The engine's cumulative ReplaySummary
        """
        for event in events:
            self.apply(event)
        return self.summary

    # ========================================================================
    # HANDLERS
    # ========================================================================

    def _handle_deposit(self, event: TransactionEvent) -> Outcome:
        existing = self.store.get_account(event.client_id)
        if existing is not None and existing.locked:
            return Outcome.ignored(IgnoreReason.ACCOUNT_LOCKED)

        account = self.store.get_or_create_account(event.client_id)
        account.available += event.amount
        account.total += event.amount
        self.store.record_entry(LedgerEntry.from_event(event))
        return APPLIED

    def _handle_withdrawal(self, event: TransactionEvent) -> Outcome:
        account = self.store.get_account(event.client_id)
        if account is None:
            return Outcome.ignored(IgnoreReason.ACCOUNT_NOT_FOUND)
        if account.locked:
            return Outcome.ignored(IgnoreReason.ACCOUNT_LOCKED)
        if account.available < event.amount:
            return Outcome.ignored(IgnoreReason.INSUFFICIENT_FUNDS)

        account.available -= event.amount
        account.total -= event.amount
        self.store.record_entry(LedgerEntry.from_event(event))
        return APPLIED

    def _handle_dispute(self, event: TransactionEvent) -> Outcome:
        entry, account, reason = self._resolve_reference(event, require_disputed=False)
        if reason is not None:
            return Outcome.ignored(reason)

        entry.disputed = True
        account.available -= entry.amount
        account.held += entry.amount
        return APPLIED

    def _handle_resolve(self, event: TransactionEvent) -> Outcome:
        entry, account, reason = self._resolve_reference(event, require_disputed=True)
        if reason is not None:
            return Outcome.ignored(reason)

        entry.disputed = False
        account.available += entry.amount
        account.held -= entry.amount
        return APPLIED

    def _handle_chargeback(self, event: TransactionEvent) -> Outcome:
        entry, account, reason = self._resolve_reference(event, require_disputed=True)
        if reason is not None:
            return Outcome.ignored(reason)

        # Entry keeps disputed=True.
        entry.charged_back = True
        account.held -= entry.amount
        account.total -= entry.amount
        account.locked = True
        return APPLIED

    def _resolve_reference(
        self,
        event: TransactionEvent,
        require_disputed: bool,
    ) -> Tuple[Optional[LedgerEntry], Optional[Account], Optional[IgnoreReason]]:
        """
        Look up the entry and account a dispute/resolve/chargeback refers to.

        Checks run in order: entry exists, entry belongs to the event's
        client, entry state, account exists, account not locked.

        Args:
            event: The dispute, resolve or chargeback event
            require_disputed: True for resolve/chargeback, False for dispute

        Returns:
            (entry, account, None) when the event may proceed,
            otherwise (None, None, reason)
        """
        entry = self.store.get_entry(event.tx_id)
        if entry is None:
            return None, None, IgnoreReason.TRANSACTION_NOT_FOUND
        if entry.client_id != event.client_id:
            return None, None, IgnoreReason.CLIENT_MISMATCH
        if entry.charged_back:
            return None, None, IgnoreReason.CHARGED_BACK
        if require_disputed and not entry.disputed:
            return None, None, IgnoreReason.NOT_DISPUTED
        if not require_disputed and entry.disputed:
            return None, None, IgnoreReason.ALREADY_DISPUTED

        account = self.store.get_account(event.client_id)
        if account is None:
            return None, None, IgnoreReason.ACCOUNT_NOT_FOUND
        if account.locked:
            return None, None, IgnoreReason.ACCOUNT_LOCKED
        return entry, account, None

    # ========================================================================
    # DIAGNOSTICS
    # ========================================================================

    def _print_outcome(self, event: TransactionEvent, outcome: Outcome) -> None:
        """Print one line for ``event``. Defaults to stderr; stdout is reserved for the report."""
        output = self.output if self.output is not None else sys.stderr
        if outcome.applied:
            print(f"✓ APPLIED: {event!r}", file=output)
        else:
            print(f"✗ IGNORED: {event!r}: {outcome.reason.value}", file=output)
