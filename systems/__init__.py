"""
Systems package: gameplay systems such as build queues and roads.
"""

from . import config_village

__all__ = ["config_village"]
