#!/usr/bin/env python3
"""
Flow Monitor Snapshot Loader

Parses flow-monitor snapshots exported as CSV into FlowRecord objects.

Expected columns:
    flow_id, source_port, destination_port, tx_packets, rx_packets,
    delay_sum_s, jitter_sum_s

jitter_sum_s may be empty for flows whose jitter is not tracked.
"""

import csv
import logging
import os
from typing import List, Optional

from .flow_key import FlowRecord

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('flow_id', 'source_port', 'tx_packets', 'rx_packets', 'delay_sum_s')

CSV_COLUMNS = [
    'flow_id', 'source_port', 'destination_port',
    'tx_packets', 'rx_packets', 'delay_sum_s', 'jitter_sum_s',
]


def _optional_int(value) -> Optional[int]:
    if value is None or str(value).strip() == '':
        return None
    return int(value)


def _optional_float(value) -> Optional[float]:
    if value is None or str(value).strip() == '':
        return None
    return float(value)


def parse_flow_row(row) -> FlowRecord:
    """
    Convert one CSV row into a FlowRecord.

    Raises:
        ValueError: If a numeric field is malformed
        KeyError: If a required column is missing
    """
    return FlowRecord(
        flow_id=_optional_int(row['flow_id']),
        source_port=_optional_int(row['source_port']),
        destination_port=_optional_int(row.get('destination_port')),
        tx_packets=int(row['tx_packets']),
        rx_packets=int(row['rx_packets']),
        delay_sum=float(row['delay_sum_s']),
        jitter_sum=_optional_float(row.get('jitter_sum_s')),
    )


def load_flow_records(csv_file) -> List[FlowRecord]:
    """
    Load a flow snapshot from CSV.

    Malformed rows are skipped with a warning.

    Args:
        csv_file: Path to flow snapshot CSV

    Returns:
        list: FlowRecord objects in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If required columns are missing from the header
    """
    if not os.path.exists(csv_file):
        raise FileNotFoundError(f"Flow snapshot not found: {csv_file}")

    records = []
    with open(csv_file, 'r', newline='') as f:
        reader = csv.DictReader(f)
        missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"Flow snapshot {csv_file} is missing columns: {', '.join(missing)}")

        for line_no, row in enumerate(reader, start=2):
            try:
                records.append(parse_flow_row(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed flow row %d in %s: %s", line_no, csv_file, e)

    logger.info("Loaded %d flow records from %s", len(records), csv_file)
    return records


def save_flow_records(records, csv_file):
    """Write flow records in the snapshot CSV format"""
    with open(csv_file, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for r in records:
            writer.writerow([
                '' if r.flow_id is None else r.flow_id,
                '' if r.source_port is None else r.source_port,
                '' if r.destination_port is None else r.destination_port,
                r.tx_packets,
                r.rx_packets,
                r.delay_sum,
                '' if r.jitter_sum is None else r.jitter_sum,
            ])
