#!/usr/bin/env python3
"""
Configuration loader for the policy routing node

Loads and validates configuration from YAML file and builds the
classifier, interface table, policy table and flow key extractor it
describes.
"""

import ipaddress
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import yaml

from ..analysis.flow_key import FlowKeyExtractor, KEY_FIELDS
from ..analysis.metrics import observation_window
from ..qos.classifier import TrafficClass, TrafficClassifier
from ..qos.dscp import parse_dscp
from ..routing.interfaces import InterfaceTable
from ..routing.policy_table import ConfigurationError, PolicyTable
from . import defaults

logger = logging.getLogger(__name__)


@dataclass
class InterfaceConfig:
    """Single local interface"""
    index: int
    address: str
    up: bool = True


@dataclass
class NodeConfig:
    """Node identity and interfaces"""
    name: str
    version: str
    description: str
    interfaces: List[InterfaceConfig]


@dataclass
class ClassificationConfig:
    """DSCP marking -> traffic class entries"""
    markings: Dict[int, TrafficClass]


@dataclass
class PolicyRuleConfig:
    """Single traffic class -> egress rule"""
    traffic_class: TrafficClass
    next_hop: str
    interface: int


@dataclass
class MeasurementConfig:
    """Flow statistics configuration"""
    flow_key: str
    port_classes: Dict[int, TrafficClass]
    assumed_packet_size_bytes: int
    jitter_classes: Optional[List[TrafficClass]]
    simulation_time: float
    warmup: float
    drain: float

    @property
    def observation_window(self) -> float:
        """Active traffic period used for throughput"""
        return observation_window(self.simulation_time, self.warmup, self.drain)


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = defaults.LOG_LEVEL
    format: str = defaults.LOG_FORMAT
    log_dir: str = defaults.LOG_DIR


@dataclass
class PbrConfig:
    """Main node configuration"""
    node: NodeConfig
    classification: ClassificationConfig
    policies: List[PolicyRuleConfig]
    measurement: MeasurementConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def name(self) -> str:
        return self.node.name

    def validate(self) -> List[str]:
        """
        Validate configuration and return list of warnings/errors.

        Returns:
            List of warning/error messages (empty if valid)
        """
        issues = []
        interfaces = {}

        if not self.node.interfaces:
            issues.append("❌ At least one interface required")

        for intf in self.node.interfaces:
            if intf.index in interfaces:
                issues.append(f"❌ Duplicate interface index {intf.index}")
            interfaces[intf.index] = intf

        seen_classes = set()
        for rule in self.policies:
            label = rule.traffic_class.value
            if rule.traffic_class is TrafficClass.UNCLASSIFIED:
                issues.append("❌ UNCLASSIFIED traffic cannot carry a policy")
            if rule.traffic_class in seen_classes:
                issues.append(f"❌ Duplicate policy for {label}")
            seen_classes.add(rule.traffic_class)

            intf = interfaces.get(rule.interface)
            if intf is None:
                issues.append(f"❌ Policy for {label} uses unknown interface {rule.interface}")
            elif not intf.up:
                issues.append(f"❌ Policy for {label} uses interface {rule.interface}, which is down")

        for traffic_class in set(self.classification.markings.values()):
            if traffic_class is not TrafficClass.UNCLASSIFIED and traffic_class not in seen_classes:
                issues.append(
                    f"⚠️  {traffic_class.value} has markings but no policy; "
                    f"it will be routed by the fallback provider"
                )

        m = self.measurement
        if m.assumed_packet_size_bytes <= 0:
            issues.append("❌ assumed_packet_size_bytes must be positive")
        if m.observation_window <= 0:
            issues.append(
                f"❌ Observation window ({m.observation_window:.1f}s) must be positive; "
                f"check simulation_time, warmup and drain"
            )
        if not m.port_classes:
            issues.append("⚠️  No measurement flows configured; reports will be empty")

        level = str(self.logging.level).upper()
        if level not in defaults.LOG_LEVELS:
            issues.append(
                f"❌ Unknown logging level {self.logging.level!r}; "
                f"use one of {', '.join(defaults.LOG_LEVELS)}"
            )

        return issues


# ============================================================================
# Parsing helpers
# ============================================================================

def _traffic_class(name, where) -> TrafficClass:
    try:
        return TrafficClass.from_name(name)
    except ValueError as e:
        raise ConfigurationError(f"{where}: {e}") from e


def _address(value, where) -> str:
    try:
        return str(ipaddress.IPv4Address(str(value)))
    except ValueError as e:
        raise ConfigurationError(f"{where}: {e}") from e


def _section(data, key) -> dict:
    """Mapping under key, empty when absent"""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"{key} must be a mapping, got {type(value).__name__}")
    return value


def _entries(data, key, where) -> Optional[list]:
    """List under key, None when absent"""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise ConfigurationError(f"{where} must be a list, got {type(value).__name__}")
    return value


def _parse_node(data) -> NodeConfig:
    interfaces = []
    for i, entry in enumerate(_entries(data, 'interfaces', 'node.interfaces') or []):
        interfaces.append(InterfaceConfig(
            index=int(entry['index']),
            address=_address(entry['address'], f"node.interfaces[{i}]"),
            up=bool(entry.get('up', True)),
        ))
    return NodeConfig(
        name=data.get('name', 'node'),
        version=str(data.get('version', '')),
        description=data.get('description', ''),
        interfaces=interfaces,
    )


def _parse_classification(data) -> ClassificationConfig:
    entries = _entries(data, 'markings', 'classification.markings')
    if entries is None:
        return ClassificationConfig(markings={
            defaults.HIGH_PRIORITY_DSCP: TrafficClass.PRIORITY_HIGH,
            defaults.BEST_EFFORT_DSCP: TrafficClass.PRIORITY_LOW,
        })

    markings = {}
    for i, entry in enumerate(entries):
        where = f"classification.markings[{i}]"
        try:
            dscp = parse_dscp(entry['dscp'])
        except ValueError as e:
            raise ConfigurationError(f"{where}: {e}") from e
        if dscp in markings:
            raise ConfigurationError(f"{where}: DSCP {dscp} mapped twice")
        markings[dscp] = _traffic_class(entry['class'], where)
    return ClassificationConfig(markings=markings)


def _parse_policies(entries) -> List[PolicyRuleConfig]:
    rules = []
    for i, entry in enumerate(entries or []):
        where = f"policies[{i}]"
        rules.append(PolicyRuleConfig(
            traffic_class=_traffic_class(entry['class'], where),
            next_hop=_address(entry['next_hop'], where),
            interface=int(entry['interface']),
        ))
    return rules


def _parse_measurement(data) -> MeasurementConfig:
    flow_key = data.get('flow_key', defaults.FLOW_KEY_FIELD)
    if flow_key not in KEY_FIELDS:
        raise ConfigurationError(f"measurement.flow_key must be one of {KEY_FIELDS}, got {flow_key!r}")

    flows = _entries(data, 'flows', 'measurement.flows')
    if flows is None:
        port_classes = {
            defaults.VOIP_PORT: TrafficClass.PRIORITY_HIGH,
            defaults.FTP_PORT: TrafficClass.PRIORITY_LOW,
        }
    else:
        port_classes = {}
        for i, entry in enumerate(flows):
            port_classes[int(entry['port'])] = _traffic_class(
                entry['class'], f"measurement.flows[{i}]"
            )

    jitter_classes = _entries(data, 'jitter_classes', 'measurement.jitter_classes')
    if jitter_classes is not None:
        jitter_classes = [
            _traffic_class(name, "measurement.jitter_classes")
            for name in jitter_classes
        ]

    timing = _section(data, 'timing')
    return MeasurementConfig(
        flow_key=flow_key,
        port_classes=port_classes,
        assumed_packet_size_bytes=int(
            data.get('assumed_packet_size_bytes', defaults.ASSUMED_PACKET_SIZE_BYTES)
        ),
        jitter_classes=jitter_classes,
        simulation_time=float(timing.get('simulation_time', defaults.SIMULATION_TIME)),
        warmup=float(timing.get('warmup', defaults.WARMUP_TIME)),
        drain=float(timing.get('drain', defaults.DRAIN_TIME)),
    )


def parse_config(data) -> PbrConfig:
    """
    Build a PbrConfig from an already-parsed YAML document.

    Raises:
        ConfigurationError: If a section is missing or malformed
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    try:
        config = PbrConfig(
            node=_parse_node(_section(data, 'node')),
            classification=_parse_classification(_section(data, 'classification')),
            policies=_parse_policies(_entries(data, 'policies', 'policies')),
            measurement=_parse_measurement(_section(data, 'measurement')),
            logging=LoggingConfig(**_section(data, 'logging')),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        if isinstance(e, ConfigurationError):
            raise
        raise ConfigurationError(f"Malformed configuration: {e!r}") from e

    return config


def load_config(config_path: str) -> PbrConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        PbrConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is malformed
        ConfigurationError: If configuration is invalid
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)

    config = parse_config(data)

    issues = config.validate()
    error_issues = [i for i in issues if i.startswith('❌')]
    warning_issues = [i for i in issues if i.startswith('⚠️')]

    for warning in warning_issues:
        logger.warning(warning)

    if error_issues:
        for error in error_issues:
            logger.error(error)
        raise ConfigurationError(
            "Invalid configuration:\n" + "\n".join(error_issues)
        )

    logger.info(
        "Configuration loaded: %s (%d interfaces, %d policies, window %.1fs)",
        config.name, len(config.node.interfaces), len(config.policies),
        config.measurement.observation_window
    )
    return config


# ============================================================================
# Builders
# ============================================================================

def build_interface_table(config: PbrConfig) -> InterfaceTable:
    """Create the node's interface resolver"""
    table = InterfaceTable()
    for intf in config.node.interfaces:
        table.add(intf.index, intf.address, up=intf.up)
    return table


def build_classifier(config: PbrConfig) -> TrafficClassifier:
    return TrafficClassifier(config.classification.markings)


def build_policy_table(config: PbrConfig, resolver) -> PolicyTable:
    """
    Create the validated policy table.

    Raises:
        ConfigurationError: If a policy references a missing or down interface
    """
    return PolicyTable.build(
        [(r.traffic_class, r.next_hop, r.interface) for r in config.policies],
        resolver,
    )


def build_flow_key_extractor(config: PbrConfig) -> FlowKeyExtractor:
    return FlowKeyExtractor(
        config.measurement.port_classes,
        key_field=config.measurement.flow_key,
    )
