#!/usr/bin/env python3
"""
Command Line Entry Point - Policy Routing Node

Usage:
    pbrqos [--config PATH] [--show-table] [--route DSCP DEST]
           [--flows CSV] [--output-dir DIR]
    python3 main.py ...                   # same, from a source checkout

Examples:
    pbrqos --show-table                   # Print active policies
    pbrqos --route EF 10.0.9.1            # Route one packet
    pbrqos --flows results/flows.csv      # QoS verification report
"""

import argparse
import os
import sys

import yaml

from pbrqos.analysis import aggregate, load_flow_records, print_summary, save_summary_csv, save_summary_txt
from pbrqos.config import (
    build_classifier,
    build_flow_key_extractor,
    build_interface_table,
    build_policy_table,
    load_config,
)
from pbrqos.qos.dscp import parse_dscp
from pbrqos.routing import ConfigurationError, FallbackRoutingProvider, Ipv4Header, PolicyRouting, SocketErrno
from pbrqos.utils import NodeLogger

DEFAULT_CONFIG = os.path.join('config', 'pbr_config.yaml')


class UnreachableFallback(FallbackRoutingProvider):
    """Stand-in when no general-purpose routing is attached to the node"""

    def route_output(self, packet, header, oif):
        return None, SocketErrno.ERROR_NOROUTETOHOST

    def route_input(self, packet, header, idev, ucb, mcb, lcb, ecb):
        return False


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='DSCP policy-based routing and QoS flow statistics'
    )
    parser.add_argument(
        '--config',
        default=DEFAULT_CONFIG,
        help='Path to configuration file'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=None,
        help='Logging level (overrides configuration)'
    )
    parser.add_argument(
        '--show-table',
        action='store_true',
        help='Print the policy routing table'
    )
    parser.add_argument(
        '--route',
        nargs=2,
        metavar=('DSCP', 'DEST'),
        help='Route a packet with the given DSCP marking to DEST'
    )
    parser.add_argument(
        '--source',
        default='10.0.1.1',
        help='Source address used with --route'
    )
    parser.add_argument(
        '--flows',
        help='Flow monitor snapshot (CSV) to aggregate'
    )
    parser.add_argument(
        '--output-dir',
        help='Save metrics_summary.txt/.csv to this directory'
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main execution flow"""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ConfigurationError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger = NodeLogger(
        name="pbrqos",
        log_dir=config.logging.log_dir,
        level=args.log_level or config.logging.level,
        log_format=config.logging.format,
    )

    logger.separator()
    logger.info(f"Starting {config.name} - {config.node.description}")
    logger.separator()

    resolver = build_interface_table(config)
    try:
        policy_table = build_policy_table(config, resolver)
    except ConfigurationError as e:
        logger.error(f"Policy configuration rejected: {e}")
        return 1

    router = PolicyRouting(
        policy_table,
        UnreachableFallback(),
        resolver,
        classifier=build_classifier(config),
    )

    if args.show_table:
        router.print_routing_table(sys.stdout)

    if args.route:
        dscp_text, destination = args.route
        try:
            header = Ipv4Header.with_dscp(args.source, destination, parse_dscp(dscp_text))
        except ValueError as e:
            logger.error(f"Invalid --route arguments: {e}")
            return 1
        logger.qos_event(f"DSCP {header.dscp} classified as {router.classify(header).value}")
        route, sockerr = router.route_output(None, header)
        if route is None:
            logger.routing_event(f"{destination} (DSCP {header.dscp}): no route ({sockerr.name})")
        else:
            logger.routing_event(
                f"{destination} (DSCP {header.dscp}): via {route.gateway} "
                f"if {route.interface} src {route.source}"
            )

    if args.flows:
        try:
            records = load_flow_records(args.flows)
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Cannot read flow snapshot: {e}")
            return 1

        m = config.measurement
        summary = aggregate(
            records,
            m.observation_window,
            extractor=build_flow_key_extractor(config),
            assumed_packet_size_bytes=m.assumed_packet_size_bytes,
            jitter_classes=m.jitter_classes,
        )
        logger.flow_event(f"{len(records)} flow records, {len(summary)} classes reported")
        print_summary(summary)

        if args.output_dir:
            os.makedirs(args.output_dir, exist_ok=True)
            save_summary_txt(summary, os.path.join(args.output_dir, 'metrics_summary.txt'))
            save_summary_csv(summary, os.path.join(args.output_dir, 'metrics_summary.csv'))

    return 0


if __name__ == '__main__':
    sys.exit(main())
