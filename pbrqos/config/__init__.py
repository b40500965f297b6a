"""Node configuration"""

from .config_loader import (
    PbrConfig,
    load_config,
    parse_config,
    build_interface_table,
    build_classifier,
    build_policy_table,
    build_flow_key_extractor,
)

__all__ = [
    'PbrConfig',
    'load_config',
    'parse_config',
    'build_interface_table',
    'build_classifier',
    'build_policy_table',
    'build_flow_key_extractor',
]
