#!/usr/bin/env python3
"""
DSCP Constants and Helpers

Centralized DSCP values used for classification and policy configuration.

Reference: RFC 2474 - Differentiated Services Field (DSCP)
"""

# ============================================================================
# Standard DSCP Values
# ============================================================================

DSCP_EF = 46    # Expedited Forwarding (VoIP / video)
DSCP_BE = 0     # Best Effort (data / FTP)

# Assured Forwarding (low drop precedence)
DSCP_AF41 = 34
DSCP_AF31 = 26
DSCP_AF21 = 18
DSCP_AF11 = 10

# Class Selector (backward compatible with IP Precedence)
DSCP_CS7 = 56  # Network Control
DSCP_CS6 = 48  # Internetwork Control
DSCP_CS5 = 40  # Voice
DSCP_CS4 = 32  # Video

DSCP_MAX = 63

DSCP_NAMES = {
    DSCP_EF: "EF (Expedited Forwarding)",
    DSCP_AF41: "AF41 (Assured Forwarding Class 4, Low Drop)",
    DSCP_AF31: "AF31 (Assured Forwarding Class 3, Low Drop)",
    DSCP_AF21: "AF21 (Assured Forwarding Class 2, Low Drop)",
    DSCP_AF11: "AF11 (Assured Forwarding Class 1, Low Drop)",
    DSCP_CS7: "CS7 (Network Control)",
    DSCP_CS6: "CS6 (Internetwork Control)",
    DSCP_BE: "BE (Best Effort)",
}

# Symbolic names accepted in configuration files
DSCP_ALIASES = {
    "ef": DSCP_EF,
    "be": DSCP_BE,
    "af41": DSCP_AF41,
    "af31": DSCP_AF31,
    "af21": DSCP_AF21,
    "af11": DSCP_AF11,
    "cs7": DSCP_CS7,
    "cs6": DSCP_CS6,
    "cs5": DSCP_CS5,
    "cs4": DSCP_CS4,
}


def dscp_from_tos(tos):
    """
    Extract the DSCP value from an IPv4 TOS byte.

    DSCP uses the upper 6 bits of the TOS byte.

    Example:
        >>> dscp_from_tos(0xb8)
        46
    """
    return (tos >> 2) & DSCP_MAX


def tos_from_dscp(dscp_value):
    """
    Build the TOS byte for a DSCP value (ECN bits cleared).

    Example:
        >>> hex(tos_from_dscp(46))
        '0xb8'
    """
    validate_dscp_value(dscp_value)
    return dscp_value << 2


def validate_dscp_value(dscp_value):
    """
    Validate that DSCP value is in valid range.

    Args:
        dscp_value (int): DSCP value to validate

    Returns:
        bool: True if valid

    Raises:
        ValueError: If dscp_value is invalid
    """
    if not isinstance(dscp_value, int) or isinstance(dscp_value, bool):
        raise ValueError(f"DSCP value must be an integer, got {type(dscp_value)}")

    if not 0 <= dscp_value <= DSCP_MAX:
        raise ValueError(f"DSCP value must be 0-{DSCP_MAX}, got {dscp_value}")

    return True


def parse_dscp(value):
    """
    Parse a DSCP value from configuration.

    Accepts integers, numeric strings ("46", "0x2e") and symbolic
    names ("EF", "BE", "AF41").

    Raises:
        ValueError: If the value cannot be parsed or is out of range
    """
    if isinstance(value, str):
        text = value.strip().lower()
        if text in DSCP_ALIASES:
            return DSCP_ALIASES[text]
        try:
            value = int(text, 0)
        except ValueError:
            raise ValueError(f"Unknown DSCP value: {value!r}")

    validate_dscp_value(value)
    return value


def get_dscp_name(dscp_value):
    """
    Get human-readable name for DSCP value.

    Example:
        >>> get_dscp_name(46)
        'EF (Expedited Forwarding)'
    """
    return DSCP_NAMES.get(dscp_value, f"DSCP {dscp_value}")
