"""QoS classification modules"""

from .classifier import TrafficClass, TrafficClassifier

__all__ = ['TrafficClass', 'TrafficClassifier']
