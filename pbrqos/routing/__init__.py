"""Policy-based routing modules"""

from .types import Ipv4Header, Route, DelegateToFallback, SocketErrno
from .interfaces import FallbackRoutingProvider, InterfaceResolver, InterfaceTable, LocalInterface
from .policy_table import ConfigurationError, EgressDescriptor, PolicyTable
from .engine import PolicyRouting

__all__ = [
    'Ipv4Header',
    'Route',
    'DelegateToFallback',
    'SocketErrno',
    'FallbackRoutingProvider',
    'InterfaceResolver',
    'InterfaceTable',
    'LocalInterface',
    'ConfigurationError',
    'EgressDescriptor',
    'PolicyTable',
    'PolicyRouting',
]
