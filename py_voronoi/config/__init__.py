"""
Configuration for the geometry engine.
"""

from .config import Settings, settings
from .log_setup import configure_logging, install_default_logging

install_default_logging()

__all__ = ['Settings', 'settings', 'configure_logging', 'install_default_logging']
