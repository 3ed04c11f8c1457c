"""
CSV boundary of the payments engine.

``read_transactions`` turns an input stream into Transaction records and
``write_accounts`` renders the final account states. Neither touches
account state.
"""

import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, List, Mapping, Optional, TextIO

from errors import MalformedInputError, OutputError
from models import MAX_AMOUNT_DIGITS, ClientAccount, Transaction, TransactionType, is_valid_amount, to_amount

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_COLUMN = "amount"
OUTPUT_COLUMNS = ["client", "available", "held", "total", "locked"]

MAX_CLIENT_ID = 0xFFFF
MAX_TRANSACTION_ID = 0xFFFFFFFF


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """
    Lazily parse transactions from a CSV stream with a header row.

    Whitespace around headers and fields is ignored and the type column is
    case-insensitive. The amount column may be empty or missing entirely.
    Raises MalformedInputError on the first row that does not parse.
    """
    reader = csv.reader(stream)
    try:
        header = next(reader, None)
        if header is None:
            return
        columns = _column_indexes(header, reader.line_num)

        for row in reader:
            if not row or all(not field.strip() for field in row):
                continue
            if len(row) > len(header):
                raise MalformedInputError(
                    f"expected at most {len(header)} fields, got {len(row)}", reader.line_num
                )
            yield _parse_row(row, columns, reader.line_num)
    except (csv.Error, UnicodeDecodeError) as e:
        raise MalformedInputError(str(e), reader.line_num) from e


def _column_indexes(header: List[str], line: int) -> Dict[str, int]:
    columns = {name.strip().lower(): idx for idx, name in enumerate(header)}
    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise MalformedInputError(f"missing required columns: {missing}", line)
    return columns


def _field(row: List[str], columns: Mapping[str, int], name: str) -> str:
    idx = columns.get(name)
    if idx is None or idx >= len(row):
        return ""
    return row[idx].strip()


def _parse_id(value: str, name: str, maximum: int, line: int) -> int:
    # Plain ASCII digits only; int() would also take signs, underscores and other scripts.
    if not (value.isascii() and value.isdigit()):
        raise MalformedInputError(f"invalid {name} id {value!r}", line)
    parsed = int(value)
    if parsed > maximum:
        raise MalformedInputError(f"{name} id {parsed} out of range 0..{maximum}", line)
    return parsed


def _parse_amount(value: str, line: int) -> Optional[Decimal]:
    if not value:
        return None
    try:
        amount = Decimal(value)
        if not amount.is_finite() or amount < 0:
            raise MalformedInputError(f"amount must be a non-negative number, got {value!r}", line)
        if not is_valid_amount(amount):
            raise MalformedInputError(
                f"amount {value!r} exceeds {MAX_AMOUNT_DIGITS} integer digits", line
            )
        return to_amount(amount.copy_abs())
    except InvalidOperation:
        raise MalformedInputError(f"invalid amount {value!r}", line) from None


def _parse_row(row: List[str], columns: Mapping[str, int], line: int) -> Transaction:
    type_str = _field(row, columns, "type").lower()
    try:
        transaction_type = TransactionType(type_str)
    except ValueError:
        logger.warning(f"Failed to parse row {row}: unknown type {type_str!r}")
        raise MalformedInputError(f"unknown transaction type {type_str!r}", line) from None

    # Dispute, resolve and chargeback rows name an earlier tx; any amount on them is ignored.
    amount = None
    if transaction_type.carries_amount:
        amount = _parse_amount(_field(row, columns, AMOUNT_COLUMN), line)

    return Transaction(
        transaction_type=transaction_type,
        client_id=_parse_id(_field(row, columns, "client"), "client", MAX_CLIENT_ID, line),
        transaction_id=_parse_id(_field(row, columns, "tx"), "tx", MAX_TRANSACTION_ID, line),
        amount=amount,
    )


def format_amount(value: Decimal) -> str:
    """Format a balance with exactly PRECISION fractional digits."""
    return f"{to_amount(value):f}"


def write_accounts(accounts: Mapping[int, ClientAccount], stream: TextIO) -> None:
    """Write one CSV row per account, ordered by client id."""
    try:
        writer = csv.writer(stream, lineterminator="\n")
        writer.writerow(OUTPUT_COLUMNS)
        for client_id in sorted(accounts):
            account = accounts[client_id]
            writer.writerow([
                client_id,
                format_amount(account.available),
                format_amount(account.held),
                format_amount(account.total),
                str(account.locked).lower(),
            ])
    # ValueError covers writes to an already closed stream.
    except (OSError, ValueError, csv.Error) as e:
        raise OutputError(str(e)) from e
