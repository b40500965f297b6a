#!/usr/bin/env python3
"""
Collaborator Interfaces

Interfaces the policy router consumes: the fallback routing provider
and the interface/address resolver of the local node.
"""

import ipaddress
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from .types import Ipv4Header, Route, SocketErrno


class FallbackRoutingProvider(ABC):
    """General-purpose routing used for traffic without a policy"""

    @abstractmethod
    def route_output(self, packet: Any, header: Ipv4Header,
                     oif: Optional[Any]) -> Tuple[Optional[Route], SocketErrno]:
        """
        Select an output route for a locally originated packet.

        Returns:
            Tuple of (route or None, socket error code)
        """
        ...

    @abstractmethod
    def route_input(self, packet: Any, header: Ipv4Header, idev: Any,
                    ucb: Callable, mcb: Callable, lcb: Callable, ecb: Callable) -> bool:
        """
        Route a received packet through one of the supplied callbacks.

        Returns:
            True if the packet was handled
        """
        ...


class InterfaceResolver(ABC):
    """Resolves local interface ids to addresses and device handles"""

    @abstractmethod
    def has_interface(self, interface: int) -> bool:
        ...

    @abstractmethod
    def is_up(self, interface: int) -> bool:
        ...

    @abstractmethod
    def get_address(self, interface: int) -> ipaddress.IPv4Address:
        ...

    @abstractmethod
    def get_net_device(self, interface: int) -> Any:
        ...


@dataclass(frozen=True)
class LocalInterface:
    """A locally attached interface"""
    index: int
    address: ipaddress.IPv4Address
    up: bool = True
    device: Any = None


class InterfaceTable(InterfaceResolver):
    """
    In-memory interface resolver.

    Built from static node configuration; the device handle defaults to
    the interface name "if<index>" when none is supplied.
    """

    def __init__(self, interfaces: Iterable[LocalInterface] = ()):
        self._interfaces: Dict[int, LocalInterface] = {}
        for intf in interfaces:
            self.add(intf.index, intf.address, up=intf.up, device=intf.device)

    def add(self, index: int, address, up: bool = True, device: Any = None) -> LocalInterface:
        """
        Register an interface.

        Raises:
            ValueError: If the index is already registered or the address is invalid
        """
        if index in self._interfaces:
            raise ValueError(f"Duplicate interface index: {index}")
        intf = LocalInterface(
            index=index,
            address=ipaddress.IPv4Address(address),
            up=up,
            device=device if device is not None else f"if{index}",
        )
        self._interfaces[index] = intf
        return intf

    def has_interface(self, interface: int) -> bool:
        return interface in self._interfaces

    def is_up(self, interface: int) -> bool:
        intf = self._interfaces.get(interface)
        return bool(intf and intf.up)

    def get_address(self, interface: int) -> ipaddress.IPv4Address:
        return self._interfaces[interface].address

    def get_net_device(self, interface: int) -> Any:
        return self._interfaces[interface].device

    def __len__(self):
        return len(self._interfaces)

    def __iter__(self):
        return iter(sorted(self._interfaces.values(), key=lambda i: i.index))
