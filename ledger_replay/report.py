"""
report.py - CSV Account Report

Writes final account state:

    client,available,held,total,locked
    1,1.5000,0.0000,1.5000,false
"""

from __future__ import annotations
from typing import Iterable, List, TextIO
import csv

from .core import AccountSnapshot, format_amount


REPORT_COLUMNS = ("client", "available", "held", "total", "locked")


def format_row(snapshot: AccountSnapshot) -> List[str]:
    """Render one snapshot as report fields."""
    return [
        str(snapshot.client_id),
        format_amount(snapshot.available),
        format_amount(snapshot.held),
        format_amount(snapshot.total),
        "true" if snapshot.locked else "false",
    ]


def write_accounts(snapshots: Iterable[AccountSnapshot], stream: TextIO) -> int:
    """
    Write the header and one row per snapshot to ``stream``.

    Returns:
        Number of account rows written
    """
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(REPORT_COLUMNS)
    count = 0
    for snapshot in snapshots:
        writer.writerow(format_row(snapshot))
        count += 1
    return count
