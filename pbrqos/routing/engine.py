#!/usr/bin/env python3
"""
Policy-Based Routing Engine

Selects an egress path per packet from its DSCP class. Packets whose
class has no policy are handed to the fallback routing provider, and
its answer is returned unchanged.

Input routing is never decided here: inbound delivery and forwarding
need multi-hop knowledge the policy table does not have, so every
route_input call goes straight to the fallback provider.
"""

import logging
import sys
from typing import Any, Callable, Optional, Tuple, Union

from ..qos.classifier import TrafficClass, TrafficClassifier
from .interfaces import FallbackRoutingProvider, InterfaceResolver
from .policy_table import PolicyTable
from .types import DelegateToFallback, Ipv4Header, Route, SocketErrno

logger = logging.getLogger(__name__)


class PolicyRouting:
    """
    Routing decision engine with policy match and fallback delegation.

    Holds no mutable state: the policy table and the classifier are
    read-only once built, so concurrent calls need no locking.
    """

    def __init__(self, policy_table: PolicyTable, fallback: FallbackRoutingProvider,
                 resolver: InterfaceResolver, classifier: Optional[TrafficClassifier] = None):
        """
        Initialize engine.

        Args:
            policy_table: Validated policy table
            fallback: Routing provider for unmatched traffic
            resolver: Local interface resolver (device handles)
            classifier: DSCP classifier (default markings if omitted)
        """
        self.policy_table = policy_table
        self.fallback = fallback
        self.resolver = resolver
        self.classifier = classifier or TrafficClassifier()

    def decide(self, packet: Any, header: Ipv4Header,
               oif: Optional[Any] = None) -> Union[Route, DelegateToFallback]:
        """
        Decide how a packet leaves the node.

        Args:
            packet: Outbound packet (passed through untouched)
            header: Its IPv4 header
            oif: Output interface hint from the caller

        Returns:
            Route built from the class policy, or DelegateToFallback
        """
        traffic_class = self.classifier.classify(header.dscp)
        descriptor = self.policy_table.lookup(traffic_class)

        if descriptor is None:
            logger.info(
                "PBR: no policy for DSCP %d (%s), deferring to fallback routing",
                header.dscp, traffic_class.value
            )
            return DelegateToFallback(packet=packet, header=header, oif=oif)

        logger.debug(
            "PBR: %s traffic to %s via %s (if %d)",
            traffic_class.value, header.destination, descriptor.next_hop, descriptor.interface
        )
        return Route(
            destination=header.destination,
            source=descriptor.source,
            gateway=descriptor.next_hop,
            interface=descriptor.interface,
            output_device=self.resolver.get_net_device(descriptor.interface),
        )

    def route_output(self, packet: Any, header: Ipv4Header,
                     oif: Optional[Any] = None) -> Tuple[Optional[Route], SocketErrno]:
        """
        Select an output route for a packet.

        Returns:
            (route, ERROR_NOTERROR) on a policy match, otherwise exactly
            what the fallback provider returned for the same arguments
        """
        decision = self.decide(packet, header, oif)
        if isinstance(decision, Route):
            return decision, SocketErrno.ERROR_NOTERROR
        return self.fallback.route_output(decision.packet, decision.header, decision.oif)

    def route_input(self, packet: Any, header: Ipv4Header, idev: Any,
                    ucb: Callable, mcb: Callable, lcb: Callable, ecb: Callable) -> bool:
        """Input routing, always decided by the fallback provider"""
        return self.fallback.route_input(packet, header, idev, ucb, mcb, lcb, ecb)

    def classify(self, header: Ipv4Header) -> TrafficClass:
        return self.classifier.classify(header.dscp)

    # ── Interface notifications ───────────────────────────────────────

    def notify_interface_up(self, interface: int):
        self._notify_fallback('notify_interface_up', interface)

    def notify_interface_down(self, interface: int):
        if any(d.interface == interface for d in self.policy_table.policies.values()):
            logger.warning("PBR: policy interface %d went down", interface)
        self._notify_fallback('notify_interface_down', interface)

    def notify_add_address(self, interface: int, address):
        self._notify_fallback('notify_add_address', interface, address)

    def notify_remove_address(self, interface: int, address):
        self._notify_fallback('notify_remove_address', interface, address)

    def _notify_fallback(self, method: str, *args):
        handler = getattr(self.fallback, method, None)
        if callable(handler):
            handler(*args)

    # ── Reporting ─────────────────────────────────────────────────────

    def print_routing_table(self, stream=None):
        """
        Write the active policies to a text stream.

        Args:
            stream: File-like object (default: sys.stdout)
        """
        stream = stream or sys.stdout
        markings = ", ".join(
            f"DSCP {dscp} -> {cls.value}"
            for dscp, cls in sorted(self.classifier.markings.items())
        )
        stream.write(f"PolicyRouting Table: Policy-Based Routing Active ({markings})\n")
        for line in self.policy_table.describe():
            stream.write(f"  {line}\n")
        stream.write("  unmatched      -> fallback routing\n")
