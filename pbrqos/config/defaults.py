#!/usr/bin/env python3
"""
Default Configuration Values

These are DEFAULT values that a node configuration file can override.
"""

# =============================================================================
# CLASSIFICATION DEFAULTS
# =============================================================================

HIGH_PRIORITY_DSCP = 46         # EF - routed over the primary path
BEST_EFFORT_DSCP = 0            # BE - routed over the secondary path

# =============================================================================
# MEASUREMENT DEFAULTS
# =============================================================================

VOIP_PORT = 9                   # High priority measurement flow
FTP_PORT = 10                   # Low priority measurement flow
ASSUMED_PACKET_SIZE_BYTES = 1500
FLOW_KEY_FIELD = "source_port"

# =============================================================================
# TIMING DEFAULTS
# =============================================================================

SIMULATION_TIME = 15.0          # Total run length (s)
WARMUP_TIME = 1.0               # Before generators start (s)
DRAIN_TIME = 2.0                # After generators stop (s)

# =============================================================================
# LOGGING DEFAULTS
# =============================================================================

LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DIR = "logs"
