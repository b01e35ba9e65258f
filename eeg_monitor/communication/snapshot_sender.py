"""
UI communication interface

This module publishes session snapshots over UDP as JSON datagrams, for a
dashboard running in another process.
"""

import json
import logging
import socket
from typing import Any, Dict

from ..core.data_types import SessionSnapshot
from ..core.config import UDP_HOST, UDP_PORT


class SnapshotSender:
    """
    Send session snapshots to a UI via UDP JSON messages

    Messages are flat enough for a render loop: connection, device, smoothed
    band power and emotions, mind state and sensor counts.
    """

    def __init__(self, host: str = UDP_HOST, port: int = UDP_PORT):
        self.host = host
        self.port = port
        self.socket = None
        self._setup_socket()

    def _setup_socket(self):
        """Setup UDP socket for communication"""
        try:
            self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            logging.info(f"UDP sender initialized: {self.host}:{self.port}")
        except Exception as e:
            logging.error(f"Failed to setup UDP socket: {e}")

    @staticmethod
    def build_message(snapshot: SessionSnapshot) -> Dict[str, Any]:
        """Flatten a snapshot into the wire message"""
        data = snapshot.to_dict()
        mind = data["mind_state"]
        current = mind["current"]
        return {
            "connection": data["connection"]["state"],
            "connection_label": data["connection"]["label"],
            "active": data["connection"]["active"],
            "packet_rate": round(data["connection"]["packet_rate"], 2),
            "device": data["device"],
            "band_power": data["band_power"]["smoothed"],
            "band_power_stale": data["band_power"]["stale"],
            "dominant_band": data["band_power"]["dominant_stable"],
            "emotions": data["emotions"]["smoothed"],
            "top_emotions": data["emotions"]["top3"],
            "emotions_stale": data["emotions"]["stale"],
            "state": current["id"] if current else None,
            "state_tier": current["tier"] if current else None,
            "state_confidence": current["confidence"] if current else None,
            "state_label": mind["label"],
            "state_blocked": mind["blocked"],
            "challenger": mind["challenger"]["id"] if mind["challenger"] else None,
            "bad_sensors": data["sensors"]["bad"],
            "good_sensors": data["sensors"]["good"],
        }

    def send_snapshot(self, snapshot: SessionSnapshot) -> bool:
        """
        Send one snapshot

        Args:
            snapshot: Current session snapshot

        Returns:
            bool: True if sent successfully
        """
        if self.socket is None:
            return False

        try:
            json_str = json.dumps(self.build_message(snapshot))
            self.socket.sendto(json_str.encode('utf-8'), (self.host, self.port))
            return True

        except Exception as e:
            logging.error(f"Failed to send UDP message: {e}")
            return False

    def close(self):
        """Close UDP socket"""
        if self.socket:
            self.socket.close()
            self.socket = None
