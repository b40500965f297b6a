#!/usr/bin/env python3
"""
Main Entry Point - Policy Routing Node

Runs the pbrqos command line from a source checkout:
    python3 main.py --show-table
"""

import sys

from pbrqos.cli import main

if __name__ == '__main__':
    sys.exit(main())
