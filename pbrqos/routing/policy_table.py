#!/usr/bin/env python3
"""
Policy Table

Maps traffic classes to egress descriptors. Built and validated once at
node configuration time, read-only afterwards.
"""

import ipaddress
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..qos.classifier import TrafficClass
from .interfaces import InterfaceResolver

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when node or policy configuration is invalid"""
    pass


@dataclass(frozen=True)
class EgressDescriptor:
    """Egress path selected for one traffic class"""
    next_hop: ipaddress.IPv4Address
    interface: int
    source: ipaddress.IPv4Address

    def __post_init__(self):
        object.__setattr__(self, 'next_hop', ipaddress.IPv4Address(self.next_hop))
        object.__setattr__(self, 'source', ipaddress.IPv4Address(self.source))


class PolicyTable:
    """
    Read-only mapping TrafficClass -> EgressDescriptor.

    Every descriptor must reference a locally attached interface that is
    up; anything else is a ConfigurationError raised here, never at
    routing time.
    """

    def __init__(self, policies: Mapping[TrafficClass, EgressDescriptor],
                 resolver: InterfaceResolver):
        """
        Initialize and validate the table.

        Args:
            policies: TrafficClass -> EgressDescriptor
            resolver: Resolver for the node's local interfaces

        Raises:
            ConfigurationError: If any policy is invalid
        """
        table: Dict[TrafficClass, EgressDescriptor] = {}
        for traffic_class, descriptor in policies.items():
            self._validate(traffic_class, descriptor, resolver)
            table[traffic_class] = descriptor

        self._policies = MappingProxyType(table)
        logger.info("Policy table built with %d entries", len(table))

    @staticmethod
    def _validate(traffic_class, descriptor, resolver):
        if not isinstance(traffic_class, TrafficClass):
            raise ConfigurationError(f"Not a traffic class: {traffic_class!r}")
        if traffic_class is TrafficClass.UNCLASSIFIED:
            raise ConfigurationError(
                "UNCLASSIFIED traffic is always routed by the fallback provider "
                "and cannot carry a policy"
            )
        if not resolver.has_interface(descriptor.interface):
            raise ConfigurationError(
                f"Policy for {traffic_class.value}: interface {descriptor.interface} does not exist"
            )
        if not resolver.is_up(descriptor.interface):
            raise ConfigurationError(
                f"Policy for {traffic_class.value}: interface {descriptor.interface} is down"
            )

    @classmethod
    def build(cls, rules: Iterable[Tuple[TrafficClass, object, int]],
              resolver: InterfaceResolver) -> "PolicyTable":
        """
        Build a table from (class, next_hop, interface) rules.

        The source address of each descriptor is the local address of
        its interface.

        Raises:
            ConfigurationError: On duplicate classes or invalid interfaces
        """
        policies: Dict[TrafficClass, EgressDescriptor] = {}
        for traffic_class, next_hop, interface in rules:
            if traffic_class in policies:
                raise ConfigurationError(f"Duplicate policy for {traffic_class.value}")
            if not resolver.has_interface(interface):
                raise ConfigurationError(
                    f"Policy for {traffic_class.value}: interface {interface} does not exist"
                )
            try:
                policies[traffic_class] = EgressDescriptor(
                    next_hop=next_hop,
                    interface=interface,
                    source=resolver.get_address(interface),
                )
            except ValueError as e:
                raise ConfigurationError(f"Policy for {traffic_class.value}: {e}") from e
        return cls(policies, resolver)

    def lookup(self, traffic_class: TrafficClass) -> Optional[EgressDescriptor]:
        """
        Get the egress descriptor for a class.

        Returns:
            The descriptor, or None for UNCLASSIFIED and classes without a policy
        """
        return self._policies.get(traffic_class)

    @property
    def policies(self) -> Mapping[TrafficClass, EgressDescriptor]:
        return self._policies

    def describe(self) -> List[str]:
        """Human-readable policy lines, one per configured class"""
        lines = []
        for traffic_class in TrafficClass:
            descriptor = self._policies.get(traffic_class)
            if descriptor is None:
                continue
            lines.append(
                f"{traffic_class.value:<14} -> via {descriptor.next_hop} "
                f"if {descriptor.interface} src {descriptor.source}"
            )
        return lines

    def __len__(self):
        return len(self._policies)

    def __contains__(self, traffic_class):
        return traffic_class in self._policies
