"""Utility modules for propdata"""

from .address_matcher import AddressMatcher, get_address_matcher
from .logging import configure_logging, get_logger

__all__ = ['AddressMatcher', 'get_address_matcher', 'configure_logging', 'get_logger']
