#!/usr/bin/env python3
"""
Unit tests for the Policy Routing engine

Run with: python3 -m pytest tests/test_routing_engine.py
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import io
import ipaddress
from unittest.mock import Mock

import numpy as np
import pytest

from pbrqos.qos.classifier import TrafficClass
from pbrqos.qos.dscp import DSCP_AF21, DSCP_BE, DSCP_EF
from pbrqos.routing import (
    DelegateToFallback,
    FallbackRoutingProvider,
    InterfaceTable,
    Ipv4Header,
    PolicyRouting,
    PolicyTable,
    Route,
    SocketErrno,
)

G1 = "10.0.2.2"
G2 = "10.0.3.2"
G3 = "10.0.1.1"


@pytest.fixture
def interfaces():
    table = InterfaceTable()
    table.add(1, "10.0.1.2")
    table.add(2, "10.0.2.1")
    table.add(3, "10.0.3.1")
    return table


@pytest.fixture
def fallback():
    return Mock(spec=FallbackRoutingProvider)


@pytest.fixture
def router(interfaces, fallback):
    policy_table = PolicyTable.build(
        [(TrafficClass.PRIORITY_HIGH, G1, 2),
         (TrafficClass.PRIORITY_LOW, G2, 3)],
        interfaces,
    )
    return PolicyRouting(policy_table, fallback, interfaces)


def header(dscp, destination="10.0.9.1"):
    return Ipv4Header.with_dscp("10.0.1.1", destination, dscp)


def test_high_priority_uses_primary_path(router, fallback):
    """Test EF traffic gets the configured gateway and interface"""
    route, sockerr = router.route_output("pkt", header(DSCP_EF, "10.0.9.1"))

    assert sockerr == SocketErrno.ERROR_NOTERROR
    assert route.gateway == ipaddress.IPv4Address(G1)
    assert route.interface == 2
    assert route.destination == ipaddress.IPv4Address("10.0.9.1")
    assert route.source == ipaddress.IPv4Address("10.0.2.1")
    assert route.output_device == "if2"
    fallback.route_output.assert_not_called()


def test_numpy_tos_byte_uses_primary_path(router, fallback):
    """Test a TOS byte read into a numpy scalar is still routed by policy"""
    hdr = Ipv4Header("10.0.1.1", "10.0.9.1", tos=np.uint8(0xb8))

    route, sockerr = router.route_output("pkt", hdr)

    assert sockerr == SocketErrno.ERROR_NOTERROR
    assert route.gateway == ipaddress.IPv4Address(G1)
    assert route.interface == 2
    fallback.route_output.assert_not_called()


def test_best_effort_uses_secondary_path(router, fallback):
    """Test BE traffic gets the configured gateway and interface"""
    route, sockerr = router.route_output("pkt", header(DSCP_BE))

    assert sockerr == SocketErrno.ERROR_NOTERROR
    assert route.gateway == ipaddress.IPv4Address(G2)
    assert route.interface == 3
    fallback.route_output.assert_not_called()


def test_policy_route_ignores_destination(router):
    """Test the egress depends only on the class, never the destination"""
    for destination in ["10.0.9.1", "192.168.1.7", "10.0.3.2", "8.8.8.8"]:
        route, _ = router.route_output(None, header(DSCP_EF, destination))
        assert route.gateway == ipaddress.IPv4Address(G1)
        assert route.interface == 2
        assert route.destination == ipaddress.IPv4Address(destination)


def test_unmatched_marking_delegates_verbatim(router, fallback):
    """Test the fallback result is returned unmodified"""
    fallback_route = Route(
        destination=ipaddress.IPv4Address("10.0.9.1"),
        source=ipaddress.IPv4Address("10.0.1.2"),
        gateway=ipaddress.IPv4Address(G3),
        interface=1,
    )
    fallback_result = (fallback_route, SocketErrno.ERROR_NOTERROR)
    fallback.route_output.return_value = fallback_result

    packet = object()
    hdr = header(DSCP_AF21)
    oif = "if1"
    result = router.route_output(packet, hdr, oif)

    assert result is fallback_result
    assert result[0].gateway == ipaddress.IPv4Address(G3)
    fallback.route_output.assert_called_once_with(packet, hdr, oif)


def test_fallback_error_passes_through(router, fallback):
    """Test the fallback's error is not hidden or overridden"""
    fallback.route_output.return_value = (None, SocketErrno.ERROR_NOROUTETOHOST)

    route, sockerr = router.route_output("pkt", header(DSCP_AF21))

    assert route is None
    assert sockerr == SocketErrno.ERROR_NOROUTETOHOST
    assert fallback.route_output.call_count == 1


def test_class_without_policy_delegates(interfaces, fallback):
    """Test a recognised class with no policy is delegated"""
    policy_table = PolicyTable.build([(TrafficClass.PRIORITY_HIGH, G1, 2)], interfaces)
    router = PolicyRouting(policy_table, fallback, interfaces)
    fallback.route_output.return_value = (None, SocketErrno.ERROR_NOROUTETOHOST)

    result = router.route_output("pkt", header(DSCP_BE))

    assert result == (None, SocketErrno.ERROR_NOROUTETOHOST)
    fallback.route_output.assert_called_once()


def test_decide_returns_delegation_signal(router, fallback):
    """Test decide() carries the original references"""
    packet = object()
    hdr = header(DSCP_AF21)

    decision = router.decide(packet, hdr, "if1")

    assert isinstance(decision, DelegateToFallback)
    assert decision.packet is packet
    assert decision.header is hdr
    assert decision.oif == "if1"
    fallback.route_output.assert_not_called()


def test_route_output_is_idempotent(router):
    """Test identical inputs yield identical routes"""
    hdr = header(DSCP_EF)

    first, _ = router.route_output("pkt", hdr)
    second, _ = router.route_output("pkt", hdr)

    assert first == second


def test_route_input_always_delegates(router, fallback):
    """Test input routing goes to the fallback for every class"""
    fallback.route_input.return_value = True
    ucb, mcb, lcb, ecb = Mock(), Mock(), Mock(), Mock()

    for dscp in [DSCP_EF, DSCP_BE, DSCP_AF21]:
        hdr = header(dscp)
        assert router.route_input("pkt", hdr, "if1", ucb, mcb, lcb, ecb) is True
        fallback.route_input.assert_called_with("pkt", hdr, "if1", ucb, mcb, lcb, ecb)

    assert fallback.route_input.call_count == 3


def test_route_input_returns_fallback_result(router, fallback):
    """Test a refused packet is reported as refused"""
    fallback.route_input.return_value = False

    assert router.route_input("pkt", header(DSCP_EF), "if1", None, None, None, None) is False


def test_interface_notifications_forwarded(interfaces):
    """Test notifications reach a fallback that implements them"""
    fallback = Mock()
    policy_table = PolicyTable.build([(TrafficClass.PRIORITY_HIGH, G1, 2)], interfaces)
    router = PolicyRouting(policy_table, fallback, interfaces)

    router.notify_interface_down(2)
    router.notify_interface_up(2)
    router.notify_add_address(1, "10.0.1.2")

    fallback.notify_interface_down.assert_called_once_with(2)
    fallback.notify_interface_up.assert_called_once_with(2)
    fallback.notify_add_address.assert_called_once_with(1, "10.0.1.2")


def test_interface_notifications_optional(router):
    """Test a fallback without notification hooks is fine"""
    router.notify_interface_up(2)
    router.notify_remove_address(2, "10.0.2.1")


def test_print_routing_table(router):
    """Test the routing table listing"""
    stream = io.StringIO()
    router.print_routing_table(stream)
    output = stream.getvalue()

    assert "Policy-Based Routing Active" in output
    assert "DSCP 46 -> priority_high" in output
    assert "via 10.0.2.2 if 2" in output
    assert "fallback" in output


if __name__ == '__main__':
    sys.exit(pytest.main([__file__, '-v']))
