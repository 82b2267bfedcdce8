"""
test_ingest.py - Tests for the CSV transaction reader

Tests:
- Header handling and whitespace
- Field parsing for every kind
- Fatal errors with line numbers
- Lazy reading from paths and streams
"""

import csv
import io

import pytest
from decimal import Decimal

from ledger_replay import (
    TransactionEvent, TransactionKind,
    MalformedRecord, MissingAmount, InvalidAmount,
    read_transactions, iter_transactions, parse_record,
)


def _events(text: str):
    return list(iter_transactions(io.StringIO(text)))


class TestParseRecord:

    def test_deposit(self):
        event = parse_record({"type": "deposit", "client": "1", "tx": "2", "amount": "1.5"})
        assert event == TransactionEvent(TransactionKind.DEPOSIT, 1, 2, Decimal("1.5"))

    def test_dispute_without_amount(self):
        event = parse_record({"type": "dispute", "client": "1", "tx": "2", "amount": ""})
        assert event == TransactionEvent(TransactionKind.DISPUTE, 1, 2)

    def test_dispute_with_missing_amount_column(self):
        event = parse_record({"type": "resolve", "client": "1", "tx": "2"})
        assert event.amount is None

    def test_stray_amount_on_dispute_ignored(self):
        event = parse_record({"type": "chargeback", "client": "1", "tx": "2", "amount": "3.0"})
        assert event.amount is None

    def test_type_case_insensitive(self):
        assert parse_record({"type": " Deposit ", "client": "1", "tx": "2", "amount": "1"}).kind \
            is TransactionKind.DEPOSIT

    def test_unknown_type(self):
        with pytest.raises(MalformedRecord, match="Unknown transaction type: 'transfer'"):
            parse_record({"type": "transfer", "client": "1", "tx": "2", "amount": "1"})

    def test_missing_type(self):
        with pytest.raises(MalformedRecord, match="Missing type"):
            parse_record({"type": "", "client": "1", "tx": "2"})

    @pytest.mark.parametrize("client", ["x", "1.5", "", None])
    def test_bad_client(self, client):
        with pytest.raises(MalformedRecord, match="client"):
            parse_record({"type": "dispute", "client": client, "tx": "2"})

    def test_client_out_of_range(self):
        with pytest.raises(MalformedRecord, match="out of range"):
            parse_record({"type": "dispute", "client": "65536", "tx": "2"})

    def test_deposit_missing_amount(self):
        with pytest.raises(MissingAmount):
            parse_record({"type": "deposit", "client": "1", "tx": "2", "amount": " "})

    def test_withdrawal_bad_amount(self):
        with pytest.raises(InvalidAmount):
            parse_record({"type": "withdrawal", "client": "1", "tx": "2", "amount": "ten"})

    @pytest.mark.parametrize("tx", ["1_000", "+5", "-5", "٣", "1e3"])
    def test_tx_must_be_plain_digits(self, tx):
        with pytest.raises(MalformedRecord, match="tx is not an integer"):
            parse_record({"type": "dispute", "client": "1", "tx": tx})

    @pytest.mark.parametrize("amount", ["1_0", "1e3", "٣.5", "NaN", "Infinity", "1.2.3"])
    def test_amount_must_be_plain_decimal(self, amount):
        with pytest.raises(InvalidAmount, match="not a number"):
            parse_record({"type": "deposit", "client": "1", "tx": "2", "amount": amount})

    @pytest.mark.parametrize("amount, expected", [(".5", "0.5"), ("3.", "3"), ("+2.25", "2.25")])
    def test_amount_decimal_forms(self, amount, expected):
        event = parse_record({"type": "deposit", "client": "1", "tx": "2", "amount": amount})
        assert event.amount == Decimal(expected)

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidAmount, match="positive"):
            parse_record({"type": "deposit", "client": "1", "tx": "2", "amount": "-1"})


class TestIterTransactions:

    def test_sample_stream(self, sample_stream):
        events = list(iter_transactions(sample_stream))
        assert [e.kind for e in events] == [
            TransactionKind.DEPOSIT, TransactionKind.DEPOSIT, TransactionKind.DEPOSIT,
            TransactionKind.WITHDRAWAL, TransactionKind.WITHDRAWAL,
        ]
        assert events[3] == TransactionEvent(TransactionKind.WITHDRAWAL, 1, 4, Decimal("1.5"))

    def test_header_without_spaces(self):
        events = _events("type,client,tx,amount\ndeposit,1,1,1.0\n")
        assert events == [TransactionEvent(TransactionKind.DEPOSIT, 1, 1, Decimal("1"))]

    def test_header_case_and_padding(self):
        events = _events(" Type , Client , TX , Amount \ndeposit, 1, 1, 1.0\n")
        assert len(events) == 1

    def test_short_rows_for_dispute_chain(self):
        text = "type,client,tx,amount\ndeposit,1,1,5\ndispute,1,1\nresolve,1,1,\n"
        events = _events(text)
        assert [e.kind for e in events] == [
            TransactionKind.DEPOSIT, TransactionKind.DISPUTE, TransactionKind.RESOLVE,
        ]

    def test_blank_lines_skipped(self):
        assert len(_events("type,client,tx,amount\n\ndeposit,1,1,5\n\n")) == 1

    def test_empty_input(self):
        with pytest.raises(MalformedRecord, match="empty") as info:
            _events("")
        assert info.value.line_number == 1

    def test_header_only(self):
        assert _events("type,client,tx,amount\n") == []

    def test_missing_column(self):
        with pytest.raises(MalformedRecord, match="missing column\\(s\\): tx"):
            _events("type,client,amount\ndeposit,1,1\n")

    def test_bad_row_reports_line_number(self):
        text = "type,client,tx,amount\ndeposit,1,1,5\ndeposit,1,2,\n"
        with pytest.raises(MissingAmount) as info:
            _events(text)
        assert info.value.line_number == 3
        assert info.value.row["tx"] == "2"
        assert str(info.value).startswith("line 3: ")

    def test_too_many_fields(self):
        with pytest.raises(MalformedRecord, match="Too many fields") as info:
            _events("type,client,tx,amount\ndeposit,1,1,5,extra\n")
        assert info.value.line_number == 2

    def test_rows_before_failure_are_yielded(self):
        reader = iter_transactions(io.StringIO("type,client,tx,amount\ndeposit,1,1,5\nbogus,1,2,\n"))
        assert next(reader).tx_id == 1
        with pytest.raises(MalformedRecord):
            next(reader)


class TestReadTransactions:

    def test_reads_path(self, sample_file):
        assert len(list(read_transactions(sample_file))) == 5

    def test_reads_str_path(self, sample_file):
        assert len(list(read_transactions(str(sample_file)))) == 5

    def test_reads_stream(self, sample_stream):
        assert len(list(read_transactions(sample_stream))) == 5

    def test_byte_order_mark_skipped(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes(b"\xef\xbb\xbftype,client,tx,amount\ndeposit,1,1,5\n")
        assert list(read_transactions(path)) == [
            TransactionEvent(TransactionKind.DEPOSIT, 1, 1, Decimal("5")),
        ]

    def test_undecodable_bytes(self, tmp_path):
        path = tmp_path / "binary.csv"
        path.write_bytes(b"\xff\xfetype,client,tx,amount\n")
        with pytest.raises(MalformedRecord, match="not valid UTF-8") as info:
            list(read_transactions(path))
        assert info.value.line_number == 1
        assert isinstance(info.value.__cause__, UnicodeDecodeError)

    def test_field_over_size_limit(self, tmp_path):
        path = tmp_path / "huge.csv"
        path.write_text("type,client,tx,amount\ndeposit,1,1,5\ndeposit,1,2," + "9" * 200_000 + "\n")
        events = read_transactions(path)
        assert next(events).tx_id == 1
        with pytest.raises(MalformedRecord, match="field larger than field limit") as info:
            next(events)
        assert info.value.line_number == 3
        assert isinstance(info.value.__cause__, csv.Error)

    def test_missing_file_raises_on_first_read(self, tmp_path):
        events = read_transactions(tmp_path / "nope.csv")
        with pytest.raises(OSError):
            next(events)
