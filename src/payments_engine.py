import logging
from typing import Dict, Iterable

from csv_io import read_transactions
from models import ClientAccount, ProcessingStats, Transaction
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Folds transactions, in input order, into per-client accounts.

    Clients never affect each other, so each record only touches the
    account named by its client id.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor()
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_transaction(self, transaction: Transaction) -> None:
        """Route a single transaction to its owning account."""
        account = self._state.get_account(transaction.client_id)
        if account is None:
            account = self._state.get_or_create_account(transaction.client_id)
            self._stats.record_account_created()

        self._processor.process_transaction(account, transaction)
        self._stats.record_processed()

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply every transaction in order and return final account states."""
        for transaction in transactions:
            self.process_transaction(transaction)

        logger.info(
            f"Processed {self._stats.processed} transactions across "
            f"{self._stats.accounts_created} accounts"
        )
        return self.get_all_accounts()

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        with open(filepath, "r", encoding="utf-8-sig", newline="") as f:
            return self.process_transactions(read_transactions(f))

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        return self._state.get_all_accounts()
