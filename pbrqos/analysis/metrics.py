#!/usr/bin/env python3
"""
Flow Statistics Aggregation

Core functions for turning flow-monitor records into per-class loss,
delay, jitter and throughput.

Aggregation never raises for bad data: a pass over a snapshot that is
being updated may undercount, but zero counts, inverted counts and
non-finite sums are handled by omission or clamping.
"""

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np

from ..qos.classifier import TrafficClass
from .flow_key import FlowKeyExtractor, FlowRecord

logger = logging.getLogger(__name__)

DEFAULT_PACKET_SIZE_BYTES = 1500


@dataclass(frozen=True)
class ClassSummary:
    """Derived performance metrics for one traffic class"""
    traffic_class: TrafficClass
    tx_packets: int
    rx_packets: int
    loss_percent: float
    avg_delay_ms: float
    avg_jitter_ms: Optional[float]
    throughput_mbps: float

    def as_dict(self):
        data = asdict(self)
        data['traffic_class'] = self.traffic_class.value
        return data


def _finite(value) -> float:
    """Coerce a counter or sum to a finite float (0.0 otherwise)"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if np.isfinite(number) else 0.0


def _count(value) -> int:
    return max(int(_finite(value)), 0)


def _duration(value) -> float:
    """Delay or jitter sum in seconds, never negative"""
    return max(_finite(value), 0.0)


def observation_window(run_seconds, warmup_seconds=0.0, drain_seconds=0.0):
    """
    Length of the active traffic period of a run.

    Leading warm-up and trailing drain time carry no traffic and would
    deflate throughput if they were counted.

    Example:
        >>> observation_window(15.0, warmup_seconds=1.0, drain_seconds=2.0)
        12.0
    """
    return max(float(run_seconds) - float(warmup_seconds) - float(drain_seconds), 0.0)


def calculate_loss_percent(tx_packets, rx_packets):
    """
    Packet loss as a percentage of transmitted packets.

    More received than transmitted (reordering between counter updates)
    is clamped to 0% loss.

    Returns:
        float: Loss percentage, or None if nothing was transmitted
    """
    if tx_packets <= 0:
        return None
    lost = max(tx_packets - rx_packets, 0)
    return lost / tx_packets * 100.0


def calculate_throughput_mbps(rx_packets, packet_size_bytes, window_seconds):
    """
    Delivered throughput in Mbit/s for a fixed packet size.

    Returns 0.0 for a non-positive or non-finite window.
    """
    window = _finite(window_seconds)
    if window <= 0:
        return 0.0
    return (rx_packets * packet_size_bytes * 8.0) / (window * 1_000_000.0)


def deduplicate(records: Iterable[FlowRecord]) -> List[FlowRecord]:
    """
    Keep the latest record per flow id.

    Records without a flow id are kept as they are.
    """
    latest: Dict[object, FlowRecord] = {}
    anonymous: List[FlowRecord] = []
    for record in records:
        if record.flow_id is None:
            anonymous.append(record)
        else:
            latest[record.flow_id] = record
    return list(latest.values()) + anonymous


def aggregate(records: Iterable[FlowRecord], observation_window_seconds,
              extractor: Optional[FlowKeyExtractor] = None,
              assumed_packet_size_bytes: int = DEFAULT_PACKET_SIZE_BYTES,
              jitter_classes=None) -> Mapping[TrafficClass, ClassSummary]:
    """
    Aggregate flow records into per-class summaries.

    Args:
        records: Flow records from the monitor (read, never modified)
        observation_window_seconds: Active traffic period, already adjusted
            for warm-up and drain time
        extractor: Record -> class mapping (default measurement ports)
        assumed_packet_size_bytes: Packet size used for throughput
        jitter_classes: Classes whose jitter is reported (default: all)

    Returns:
        Read-only mapping {TrafficClass: ClassSummary}; classes with no
        transmitted or no received packets are omitted
    """
    extractor = extractor or FlowKeyExtractor()
    buckets: Dict[TrafficClass, List[FlowRecord]] = defaultdict(list)

    for record in deduplicate(records):
        traffic_class = extractor.extract_class(record)
        if traffic_class is None:
            continue
        buckets[traffic_class].append(record)

    window = _finite(observation_window_seconds)
    if window <= 0:
        logger.warning(
            "Observation window %r is not positive, throughput reported as 0",
            observation_window_seconds
        )

    summary: Dict[TrafficClass, ClassSummary] = {}
    for traffic_class in TrafficClass:
        bucket = buckets.get(traffic_class)
        if not bucket:
            continue

        tx = int(np.sum([_count(r.tx_packets) for r in bucket], dtype=np.int64))
        rx = int(np.sum([_count(r.rx_packets) for r in bucket], dtype=np.int64))

        # No data is not the same as total loss
        if tx == 0 or rx == 0:
            logger.debug("Skipping %s: tx=%d rx=%d", traffic_class.value, tx, rx)
            continue

        delay_sum = float(np.sum([_duration(r.delay_sum) for r in bucket]))

        avg_jitter_ms = None
        tracked = [r.jitter_sum for r in bucket if r.jitter_sum is not None]
        if tracked and (jitter_classes is None or traffic_class in jitter_classes):
            jitter_sum = float(np.sum([_duration(j) for j in tracked]))
            avg_jitter_ms = jitter_sum / rx * 1000.0

        summary[traffic_class] = ClassSummary(
            traffic_class=traffic_class,
            tx_packets=tx,
            rx_packets=rx,
            loss_percent=calculate_loss_percent(tx, rx),
            avg_delay_ms=delay_sum / rx * 1000.0,
            avg_jitter_ms=avg_jitter_ms,
            throughput_mbps=calculate_throughput_mbps(rx, assumed_packet_size_bytes, window),
        )

    return MappingProxyType(summary)
