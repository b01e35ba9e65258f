"""
Communication interfaces

This module handles external communication, publishing session snapshots
over UDP to a dashboard.
"""

from .snapshot_sender import SnapshotSender

__all__ = ['SnapshotSender']
