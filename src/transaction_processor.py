import logging

from models import ClientAccount, LedgerEntry, Transaction, TransactionType, is_valid_amount

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to the account that owns them.

    Rejected transactions (insufficient funds, unknown or out-of-state
    dispute targets, anything on a locked account) leave the account
    untouched and are only logged. Nothing is raised or returned.
    """

    def process_transaction(self, account: ClientAccount, transaction: Transaction) -> None:
        # NOTE: every record for a locked account is dropped, fresh deposits included.
        # Callers that want deposits to land on frozen accounts have to change this guard.
        if account.locked:
            logger.debug(f"{transaction}: account {account.client_id} is locked, ignoring")
            return

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                self._handle_chargeback(account, transaction)

    def _accepts_new_entry(self, account: ClientAccount, transaction: Transaction) -> bool:
        if transaction.amount is None or not is_valid_amount(transaction.amount):
            logger.debug(f"{transaction}: invalid amount {transaction.amount}, ignoring")
            return False

        if account.has_entry(transaction.transaction_id):
            logger.debug(f"{transaction}: tx {transaction.transaction_id} already recorded, ignoring")
            return False

        return True

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> None:
        if not self._accepts_new_entry(account, transaction):
            return

        entry = LedgerEntry.from_transaction(transaction)
        account.credit(entry.amount)
        account.add_entry(entry)

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> None:
        if not self._accepts_new_entry(account, transaction):
            return

        entry = LedgerEntry.from_transaction(transaction)
        if entry.amount > account.available:
            logger.debug(f"{transaction}: insufficient funds (available {account.available}), ignoring")
            return

        account.debit(entry.amount)
        account.add_entry(entry)

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> None:
        entry = account.get_entry(transaction.transaction_id)

        if entry is None:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: not in client {account.client_id} history")
            return

        if entry.disputed:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: transaction already disputed")
            return

        # Available may go negative here when the disputed funds were already withdrawn.
        account.hold(entry.amount)
        entry.disputed = True

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> None:
        entry = account.get_entry(transaction.transaction_id)

        if entry is None or not entry.disputed:
            logger.debug(f"Resolve for tx {transaction.transaction_id}: transaction not under dispute")
            return

        account.release_hold(entry.amount)
        entry.disputed = False

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> None:
        entry = account.get_entry(transaction.transaction_id)

        if entry is None or not entry.disputed:
            logger.debug(f"Chargeback for tx {transaction.transaction_id}: transaction not under dispute")
            return

        # The entry stays disputed; the lock makes this its final state.
        account.remove_held(entry.amount)
        account.locked = True
        logger.info(f"Chargeback for tx {transaction.transaction_id}: client {account.client_id} locked")
