"""Utility helpers."""
from .logging import LoggingSession, WarningCounter, setup_logging, shutdown_logging

__all__ = ['LoggingSession', 'WarningCounter', 'setup_logging', 'shutdown_logging']
