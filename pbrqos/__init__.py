"""pbrqos: DSCP policy-based routing with per-class flow statistics."""

from pbrqos.qos import TrafficClass, TrafficClassifier
from pbrqos.routing import (
    ConfigurationError,
    DelegateToFallback,
    EgressDescriptor,
    FallbackRoutingProvider,
    InterfaceTable,
    Ipv4Header,
    PolicyRouting,
    PolicyTable,
    Route,
    SocketErrno,
)
from pbrqos.analysis import ClassSummary, FlowKeyExtractor, FlowRecord, aggregate

__all__ = [
    "TrafficClass",
    "TrafficClassifier",
    "ConfigurationError",
    "DelegateToFallback",
    "EgressDescriptor",
    "FallbackRoutingProvider",
    "InterfaceTable",
    "Ipv4Header",
    "PolicyRouting",
    "PolicyTable",
    "Route",
    "SocketErrno",
    "ClassSummary",
    "FlowKeyExtractor",
    "FlowRecord",
    "aggregate",
]
