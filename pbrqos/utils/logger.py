#!/usr/bin/env python3
"""
Structured logging utility for the policy routing node

Provides consistent logging across all modules.
"""

import logging
import os
from datetime import datetime
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class NodeLogger:
    """
    Structured logger for node components.

    Provides different log methods for different event types.
    """

    def __init__(self, name: str, log_dir: Optional[str] = None, level: str = "INFO",
                 log_format: Optional[str] = None):
        """
        Initialize logger.

        Args:
            name: Logger name (usually module name)
            log_dir: Directory to store log files (None = console only)
            level: Log level (DEBUG, INFO, WARNING, ERROR)
            log_format: Custom log format string
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.log_file = None

        formatter = logging.Formatter(log_format or DEFAULT_FORMAT)

        # Re-initializing the same logger must not duplicate output
        for handler in list(self.logger.handlers):
            if getattr(handler, '_node_logger', False):
                self.logger.removeHandler(handler)
                handler.close()

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.log_file = os.path.join(log_dir, f"{name}_{timestamp}.log")

            fh = logging.FileHandler(self.log_file)
            fh.setLevel(getattr(logging, level.upper()))
            fh.setFormatter(formatter)
            fh._node_logger = True
            self.logger.addHandler(fh)

        # Also log to console
        ch = logging.StreamHandler()
        ch.setLevel(logging.INFO)
        ch.setFormatter(formatter)
        ch._node_logger = True
        self.logger.addHandler(ch)

    def info(self, msg: str, **kwargs):
        """Log info message"""
        self.logger.info(msg, extra=kwargs)

    def error(self, msg: str, **kwargs):
        """Log error message"""
        self.logger.error(msg, extra=kwargs)

    def routing_event(self, event: str, **kwargs):
        """Log routing decision event"""
        self.logger.info(f"[ROUTING] {event}", extra=kwargs)

    def qos_event(self, event: str, **kwargs):
        """Log QoS-related event"""
        self.logger.info(f"[QOS] {event}", extra=kwargs)

    def flow_event(self, event: str, **kwargs):
        """Log flow statistics event"""
        self.logger.info(f"[FLOW] {event}", extra=kwargs)

    def separator(self, char: str = "=", length: int = 70):
        """Log separator line"""
        self.logger.info(char * length)
