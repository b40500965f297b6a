#!/usr/bin/env python3
"""
Traffic Classifier

Maps a packet's DSCP marking to a traffic class.
"""

import operator
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from .dscp import DSCP_BE, DSCP_EF, DSCP_MAX


class TrafficClass(Enum):
    """Traffic classes handled by the policy router"""
    PRIORITY_HIGH = "priority_high"   # DSCP EF (VoIP / video)
    PRIORITY_LOW = "priority_low"     # DSCP BE (data / FTP)
    UNCLASSIFIED = "unclassified"     # Catch-all, routed by the fallback

    @classmethod
    def from_name(cls, name: str) -> "TrafficClass":
        """
        Resolve a class from its configuration name.

        Accepts the value ("priority_high") or the member name ("PRIORITY_HIGH").

        Raises:
            ValueError: If the name matches no class
        """
        text = str(name).strip()
        for member in cls:
            if text.lower() == member.value or text.upper() == member.name:
                return member
        raise ValueError(f"Unknown traffic class: {name!r}")

    @property
    def label(self) -> str:
        return _CLASS_LABELS[self]


_CLASS_LABELS = {
    TrafficClass.PRIORITY_HIGH: "High Priority / DSCP EF",
    TrafficClass.PRIORITY_LOW: "Low Priority / DSCP BE",
    TrafficClass.UNCLASSIFIED: "Unclassified",
}

DEFAULT_MARKINGS = {
    DSCP_EF: TrafficClass.PRIORITY_HIGH,
    DSCP_BE: TrafficClass.PRIORITY_LOW,
}


class TrafficClassifier:
    """
    Classifies packets by DSCP marking.

    This is a pure, stateless classifier: the marking map is fixed at
    construction and every input maps to exactly one class.
    """

    def __init__(self, markings: Optional[Mapping[int, TrafficClass]] = None):
        """
        Initialize classifier.

        Args:
            markings: DSCP value -> TrafficClass (default: EF -> high, BE -> low)
        """
        table: Dict[int, TrafficClass] = dict(DEFAULT_MARKINGS if markings is None else markings)
        self._markings = MappingProxyType(table)

    @property
    def markings(self) -> Mapping[int, TrafficClass]:
        """Read-only view of the marking map"""
        return self._markings

    def classify(self, marking) -> TrafficClass:
        """
        Classify a DSCP marking.

        Args:
            marking: DSCP value (0-63)

        Returns:
            The configured TrafficClass, or UNCLASSIFIED for any other value

        Example:
            >>> TrafficClassifier().classify(46)
            <TrafficClass.PRIORITY_HIGH: 'priority_high'>
            >>> TrafficClassifier().classify(18)
            <TrafficClass.UNCLASSIFIED: 'unclassified'>
        """
        if isinstance(marking, bool):
            return TrafficClass.UNCLASSIFIED
        # numpy and other integer-like scalars count as their integer value
        try:
            marking = operator.index(marking)
        except TypeError:
            return TrafficClass.UNCLASSIFIED
        if not 0 <= marking <= DSCP_MAX:
            return TrafficClass.UNCLASSIFIED
        return self._markings.get(marking, TrafficClass.UNCLASSIFIED)

    def classify_header(self, header) -> TrafficClass:
        """Classify an IPv4 header by its DSCP field"""
        return self.classify(header.dscp)
