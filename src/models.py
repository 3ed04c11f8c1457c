from dataclasses import dataclass, field
from decimal import Context, Decimal, DivisionByZero, Inexact, InvalidOperation, Overflow, Rounded, ROUND_DOWN
from enum import Enum
from typing import Dict, Iterator, Optional, Union

PRECISION = 5
QUANTUM = Decimal(1).scaleb(-PRECISION)

# Amounts may have at most this many integer digits. Balances get the
# remaining context precision as headroom, far beyond any realistic run.
MAX_AMOUNT_DIGITS = 30
CONTEXT_PRECISION = 100

# Truncation to QUANTUM is the only rounding allowed.
QUANTIZE_CONTEXT = Context(
    prec=CONTEXT_PRECISION, rounding=ROUND_DOWN, traps=[InvalidOperation, DivisionByZero, Overflow]
)
# Balance arithmetic must be exact; any rounding raises instead of losing digits.
BALANCE_CONTEXT = Context(
    prec=CONTEXT_PRECISION, rounding=ROUND_DOWN,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact, Rounded],
)

ZERO = Decimal("0").quantize(QUANTUM)


def to_amount(value: Union[Decimal, str, int]) -> Decimal:
    """Truncate a value to the fixed fractional precision used for all balances."""
    return Decimal(value).quantize(QUANTUM, rounding=ROUND_DOWN, context=QUANTIZE_CONTEXT)


def is_valid_amount(value: Decimal) -> bool:
    """Finite, non-negative and small enough for exact balance arithmetic."""
    return value.is_finite() and value >= 0 and (value.is_zero() or value.adjusted() < MAX_AMOUNT_DIGITS)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class LedgerEntry:
    """A deposit or withdrawal archived by the account that applied it."""

    transaction_id: int
    transaction_type: TransactionType
    amount: Decimal
    disputed: bool = False

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "LedgerEntry":
        return cls(
            transaction_id=transaction.transaction_id,
            transaction_type=transaction.transaction_type,
            amount=to_amount(transaction.amount),
        )


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    total: Decimal = ZERO
    locked: bool = False
    _entries: Dict[int, LedgerEntry] = field(default_factory=dict, repr=False, compare=False)

    # Every mutator keeps total == available + held.

    def credit(self, amount: Decimal) -> None:
        amount = to_amount(amount)
        self.available = BALANCE_CONTEXT.add(self.available, amount)
        self.total = BALANCE_CONTEXT.add(self.total, amount)

    def debit(self, amount: Decimal) -> None:
        amount = to_amount(amount)
        self.available = BALANCE_CONTEXT.subtract(self.available, amount)
        self.total = BALANCE_CONTEXT.subtract(self.total, amount)

    def hold(self, amount: Decimal) -> None:
        amount = to_amount(amount)
        self.available = BALANCE_CONTEXT.subtract(self.available, amount)
        self.held = BALANCE_CONTEXT.add(self.held, amount)

    def release_hold(self, amount: Decimal) -> None:
        amount = to_amount(amount)
        self.held = BALANCE_CONTEXT.subtract(self.held, amount)
        self.available = BALANCE_CONTEXT.add(self.available, amount)

    def remove_held(self, amount: Decimal) -> None:
        amount = to_amount(amount)
        self.held = BALANCE_CONTEXT.subtract(self.held, amount)
        self.total = BALANCE_CONTEXT.subtract(self.total, amount)

    def get_entry(self, transaction_id: int) -> Optional[LedgerEntry]:
        return self._entries.get(transaction_id)

    def has_entry(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    def add_entry(self, entry: LedgerEntry) -> None:
        self._entries[entry.transaction_id] = entry

    def entries(self) -> Iterator[LedgerEntry]:
        return iter(self._entries.values())


class ProcessingStats:
    """Counters for a single fold over the input."""

    def __init__(self):
        self.processed = 0
        self.accounts_created = 0

    def record_processed(self):
        self.processed += 1

    def record_account_created(self):
        self.accounts_created += 1
