"""
Tests for the UDP snapshot sender
"""

import json

from conftest import DEV, MET
from eeg_monitor.communication.snapshot_sender import SnapshotSender
from eeg_monitor.core.data_types import MindState, Tier


class TestSnapshotSender:
    """Test cases for SnapshotSender."""

    def test_build_message_initial(self, store):
        message = SnapshotSender.build_message(store.snapshot())

        assert message["connection"] == "disconnected"
        assert message["connection_label"] == "EEG Disconnected"
        assert message["state"] is None
        assert message["state_label"] == "Initializing..."
        assert message["band_power_stale"] is True
        json.dumps(message)

    def test_build_message_with_state(self, active_store):
        active_store.receive_packet("dev", DEV)
        active_store.receive_packet("met", MET)
        active_store.update_mind_state(MindState("focused", 0.72, Tier.CONFIRMED),
                                       challenger=MindState("relaxed", 0.2))

        message = SnapshotSender.build_message(active_store.snapshot())

        assert message["state"] == "focused"
        assert message["state_tier"] == "confirmed"
        assert message["state_confidence"] == 0.72
        assert message["challenger"] == "relaxed"
        assert message["bad_sensors"] == 2
        assert message["device"]["eeg_quality"] == 93
        assert message["top_emotions"][0] == {"name": "Focus", "score": 0.8}

    def test_send_after_close(self, store):
        sender = SnapshotSender("127.0.0.1", 5006)
        sender.close()
        assert sender.send_snapshot(store.snapshot()) is False
