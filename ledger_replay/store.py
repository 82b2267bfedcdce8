"""
store.py - Account and Transaction Storage

LedgerStore owns the two maps replay needs:
    - client_id -> Account
    - tx_id -> LedgerEntry (deposits and withdrawals, kept for disputes)

It holds no business rules. TransactionEngine decides what to mutate; the
store only creates, returns, and records.
"""

from __future__ import annotations
from typing import Any, Dict, Iterator, List, Optional

from .core import Account, AccountSnapshot, LedgerEntry


class LedgerStore:
    """
    In-memory storage for one replay run.

    Thread Safety:
        Not thread-safe. A store is owned by a single TransactionEngine.

    Example:
        store = LedgerStore()
        account = store.get_or_create_account(1)
        store.get_account(2)        # None, no account is created
    """

    def __init__(self):
        self.accounts: Dict[int, Account] = {}
        self.entries: Dict[int, LedgerEntry] = {}

    # ========================================================================
    # ACCOUNTS
    # ========================================================================

    def get_or_create_account(self, client_id: int) -> Account:
        """
        Return the account for client_id, inserting a zeroed, unlocked one if absent.

        Only deposits may call this; every other kind must use get_account().
        """
        account = self.accounts.get(client_id)
        if account is None:
            account = Account(client_id=client_id)
            self.accounts[client_id] = account
        return account

    def get_account(self, client_id: int) -> Optional[Account]:
        """Return the account for client_id, or None. Never creates."""
        return self.accounts.get(client_id)

    def list_clients(self) -> List[int]:
        """List all known client ids in ascending order."""
        return sorted(self.accounts)

    # ========================================================================
    # LEDGER ENTRIES
    # ========================================================================

    def record_entry(self, entry: LedgerEntry) -> None:
        """
        Store a deposit or withdrawal entry keyed by tx_id.

        A reused tx_id overwrites the earlier entry (last write wins).
        """
        self.entries[entry.tx_id] = entry

    def get_entry(self, tx_id: int) -> Optional[LedgerEntry]:
        """Return the entry recorded under tx_id, or None."""
        return self.entries.get(tx_id)

    # ========================================================================
    # READ-SIDE HELPERS
    # ========================================================================

    def snapshots(self) -> Iterator[AccountSnapshot]:
        """Yield an immutable snapshot of every account, ordered by client id."""
        for client_id in self.list_clients():
            yield self.accounts[client_id].snapshot()

    def verify_balances(self) -> Dict[str, Any]:
        """
        Check that total == available + held holds for every account.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every account balances
            - 'discrepancies': List[Dict] - one entry per unbalanced account,
              with client_id, available, held, total and difference

        Example:
            result = store.verify_balances()
            assert result['valid'], result['discrepancies']
        """
        discrepancies = []
        for client_id in self.list_clients():
            account = self.accounts[client_id]
            if not account.is_balanced():
                discrepancies.append({
                    'client_id': client_id,
                    'available': account.available,
                    'held': account.held,
                    'total': account.total,
                    'difference': account.total - (account.available + account.held),
                })
        return {
            'valid': len(discrepancies) == 0,
            'discrepancies': discrepancies,
        }

    def __len__(self) -> int:
        return len(self.accounts)

    def __contains__(self, client_id: object) -> bool:
        return client_id in self.accounts
