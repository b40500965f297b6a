#!/usr/bin/env python3
"""
Routing Data Types

Header, route and delegation types exchanged between the policy router,
the fallback routing provider and the transport layer.
"""

import ipaddress
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional

from ..qos.dscp import dscp_from_tos, tos_from_dscp


class SocketErrno(IntEnum):
    """Socket-level error codes reported by output routing"""
    ERROR_NOTERROR = 0
    ERROR_ISCONN = 1
    ERROR_NOTCONN = 2
    ERROR_MSGSIZE = 3
    ERROR_AGAIN = 4
    ERROR_SHUTDOWN = 5
    ERROR_OPNOTSUPP = 6
    ERROR_AFNOSUPPORT = 7
    ERROR_INVAL = 8
    ERROR_BADF = 9
    ERROR_NOROUTETOHOST = 10
    ERROR_NODEV = 11
    ERROR_ADDRNOTAVAIL = 12
    ERROR_ADDRINUSE = 13


@dataclass(frozen=True)
class Ipv4Header:
    """Fields of an IPv4 header needed for routing"""
    source: ipaddress.IPv4Address
    destination: ipaddress.IPv4Address
    tos: int = 0
    protocol: int = 17
    ttl: int = 64

    def __post_init__(self):
        # Accept dotted strings for convenience
        object.__setattr__(self, 'source', ipaddress.IPv4Address(self.source))
        object.__setattr__(self, 'destination', ipaddress.IPv4Address(self.destination))

    @property
    def dscp(self) -> int:
        """DSCP marking carried in the TOS byte"""
        return dscp_from_tos(self.tos)

    @classmethod
    def with_dscp(cls, source, destination, dscp: int, **kwargs) -> "Ipv4Header":
        """Build a header marked with the given DSCP value"""
        return cls(source=source, destination=destination, tos=tos_from_dscp(dscp), **kwargs)


@dataclass(frozen=True)
class Route:
    """Output route selected for a packet"""
    destination: ipaddress.IPv4Address
    source: ipaddress.IPv4Address
    gateway: ipaddress.IPv4Address
    interface: int
    output_device: Any = None


@dataclass(frozen=True)
class DelegateToFallback:
    """
    Signal that the fallback routing provider must decide this packet.

    Carries the original references unchanged so the provider sees
    exactly what the policy router was given.
    """
    packet: Any
    header: Ipv4Header
    oif: Optional[Any] = None
