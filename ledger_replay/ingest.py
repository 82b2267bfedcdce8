"""
ingest.py - CSV Transaction Reader

Turns a CSV stream into TransactionEvents, one row at a time:

    type, client, tx, amount
    deposit, 1, 1, 1.0
    dispute, 1, 1,

Whitespace around fields is ignored and ``type`` is case-insensitive. The
amount column may be empty, or missing entirely on rows that take no amount;
on those rows any value in it is ignored.

Any row that cannot be parsed raises MalformedRecord (or a subclass) with
the line number attached. Reading is lazy, so rows before the bad one have
already been yielded by the time it raises.
"""

from __future__ import annotations
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterator, List, Optional, TextIO, Union
import csv
import re

from .core import (
    TransactionEvent, TransactionKind,
    MalformedRecord, InvalidAmount, to_amount,
)


# Column names expected in the header row.
REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_COLUMN = "amount"

# Plain ASCII decimal notation only: no exponents, digit separators or
# non-ASCII digits.
_INT_PATTERN = re.compile(r"[0-9]+")
_AMOUNT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def _parse_int(value: Optional[str], column: str) -> int:
    if value is None or not value.strip():
        raise MalformedRecord(f"Missing {column}")
    if not _INT_PATTERN.fullmatch(value.strip()):
        raise MalformedRecord(f"{column} is not an integer: {value!r}")
    return int(value.strip())


def _parse_amount(value: str) -> Decimal:
    if not _AMOUNT_PATTERN.fullmatch(value.strip()):
        raise InvalidAmount(f"Amount is not a number: {value!r}")
    return to_amount(value)


def _parse_kind(value: Optional[str]) -> TransactionKind:
    if value is None or not value.strip():
        raise MalformedRecord("Missing type")
    try:
        return TransactionKind(value.strip().lower())
    except ValueError:
        raise MalformedRecord(f"Unknown transaction type: {value.strip()!r}") from None


def parse_record(row: Dict[str, Optional[str]]) -> TransactionEvent:
    """
    Build a TransactionEvent from one CSV row keyed by column name.

    Raises:
        MalformedRecord: If a field is missing or unparseable
        MissingAmount: If a deposit or withdrawal has no amount
        InvalidAmount: If a deposit or withdrawal amount is unparseable or not positive
    """
    kind = _parse_kind(row.get("type"))
    client_id = _parse_int(row.get("client"), "client")
    tx_id = _parse_int(row.get("tx"), "tx")

    # Dispute-chain rows may carry a stray amount; it is not used.
    amount = None
    raw_amount = row.get(AMOUNT_COLUMN)
    if kind.carries_amount and raw_amount is not None and raw_amount.strip():
        amount = _parse_amount(raw_amount)

    return TransactionEvent(kind=kind, client_id=client_id, tx_id=tx_id, amount=amount)


def _normalize_header(fieldnames: Optional[List[str]]) -> List[str]:
    if not fieldnames:
        raise MalformedRecord("Input is empty, expected a header row", line_number=1)
    header = [name.strip().lower() for name in fieldnames]
    missing = [column for column in REQUIRED_COLUMNS if column not in header]
    if missing:
        raise MalformedRecord(
            f"Header is missing column(s): {', '.join(missing)}",
            line_number=1,
            row=fieldnames,
        )
    return header


def _unreadable(error: Exception, reader: csv.DictReader) -> MalformedRecord:
    # A csv.Error is raised after the offending line is counted; a decode
    # error is raised before the line it belongs to is handed over.
    if isinstance(error, UnicodeDecodeError):
        return MalformedRecord("Input is not valid UTF-8", line_number=reader.line_num + 1)
    return MalformedRecord(f"Unreadable CSV: {error}", line_number=max(reader.line_num, 1))


def iter_transactions(stream: TextIO) -> Iterator[TransactionEvent]:
    """
    Yield TransactionEvents from an open CSV text stream.

    Blank lines are skipped. Rows with more fields than the header are
    malformed, as are undecodable bytes and CSV syntax errors (including
    fields over ``csv.field_size_limit()``).

    Raises:
        MalformedRecord: On the first row that cannot be parsed, with
            ``line_number`` set (and ``row`` when the row could be split)
    """
    reader = csv.DictReader(stream, skipinitialspace=True)
    try:
        fieldnames = reader.fieldnames
    except (csv.Error, UnicodeDecodeError) as e:
        raise _unreadable(e, reader) from e
    reader.fieldnames = _normalize_header(fieldnames)

    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except (csv.Error, UnicodeDecodeError) as e:
            raise _unreadable(e, reader) from e

        if None in row:
            raise MalformedRecord("Too many fields", line_number=reader.line_num, row=row)
        try:
            yield parse_record(row)
        except MalformedRecord as e:
            e.line_number = reader.line_num
            e.row = row
            raise


def read_transactions(source: Union[str, Path, TextIO]) -> Iterator[TransactionEvent]:
    """
    Yield TransactionEvents from a CSV file path or an open text stream.

    A path is opened lazily and closed once the generator is exhausted or
    closed. A leading UTF-8 byte order mark is skipped.

    Raises:
        OSError: If the file cannot be opened
        MalformedRecord: On the first row that cannot be parsed
    """
    if isinstance(source, (str, Path)):
        with open(source, newline="", encoding="utf-8-sig") as stream:
            yield from iter_transactions(stream)
    else:
        yield from iter_transactions(source)
