#!/usr/bin/env python3
"""
Flow Records and Flow Key Extraction

A FlowRecord is one flow's delivery counters as reported by the flow
monitor. The FlowKeyExtractor attributes a record to a measurement
class using a port number agreed on with the traffic generator.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from ..qos.classifier import TrafficClass

# Well-known measurement ports (generator <-> monitor)
VOIP_PORT = 9
FTP_PORT = 10

DEFAULT_PORT_CLASSES = {
    VOIP_PORT: TrafficClass.PRIORITY_HIGH,
    FTP_PORT: TrafficClass.PRIORITY_LOW,
}

KEY_FIELDS = ('source_port', 'destination_port')


@dataclass(frozen=True)
class FlowRecord:
    """Delivery counters for one observed flow"""
    flow_id: Optional[int]
    source_port: Optional[int]
    tx_packets: int
    rx_packets: int
    delay_sum: float = 0.0                # seconds
    jitter_sum: Optional[float] = None    # seconds, None when not tracked
    destination_port: Optional[int] = None


class FlowKeyExtractor:
    """
    Maps a flow record to a measurement class.

    Records that match no configured port return None and are left out
    of aggregation entirely; they are not folded into UNCLASSIFIED.
    """

    def __init__(self, port_classes: Optional[Mapping[int, TrafficClass]] = None,
                 key_field: str = 'source_port'):
        """
        Initialize extractor.

        Args:
            port_classes: Port number -> TrafficClass (default: 9 -> high, 10 -> low)
            key_field: Record field holding the port ("source_port" or "destination_port")

        Raises:
            ValueError: If key_field is not a port field
        """
        if key_field not in KEY_FIELDS:
            raise ValueError(f"key_field must be one of {KEY_FIELDS}, got {key_field!r}")

        table: Dict[int, TrafficClass] = dict(
            DEFAULT_PORT_CLASSES if port_classes is None else port_classes
        )
        self._port_classes = MappingProxyType(table)
        self.key_field = key_field

    @property
    def port_classes(self) -> Mapping[int, TrafficClass]:
        return self._port_classes

    @property
    def classes(self):
        """Measurement classes this extractor can report"""
        return set(self._port_classes.values())

    def extract_class(self, record: FlowRecord) -> Optional[TrafficClass]:
        """
        Get the measurement class of a record.

        Returns:
            TrafficClass, or None if the record's port is not a measurement port
        """
        port = getattr(record, self.key_field, None)
        if port is None:
            return None
        return self._port_classes.get(port)
