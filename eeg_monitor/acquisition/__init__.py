"""
Telemetry acquisition sources

This module handles the transports that deliver dev/pow/met payloads:
LSL streams and synthetic data generation.
"""

from .sources import LSLPacketSource, FakePacketSource

__all__ = ['LSLPacketSource', 'FakePacketSource']
