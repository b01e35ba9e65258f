"""
Main CLI entry point for EEG Monitor

This module provides the command-line interface and the real-time loop
that feeds headset telemetry through the session store.
"""

import argparse
import logging
import signal
import sys
import time
from threading import Event

from ..core.config import *
from ..core.data_types import SessionSnapshot
from ..acquisition.sources import LSLPacketSource, FakePacketSource
from ..communication.snapshot_sender import SnapshotSender
from ..session.store import SessionStore
from ..session.runner import SessionRunner


def format_status(snapshot: SessionSnapshot) -> str:
    """One status line for the console"""
    current = snapshot.mind_state.current
    state = f"{current.id} ({current.tier.value})" if current else "-"
    device = snapshot.device
    quality = f"{device.eeg_quality}%" if device.eeg_quality is not None else "n/a"
    stale = []
    if snapshot.band_power.stale:
        stale.append("pow")
    if snapshot.emotions.stale:
        stale.append("met")
    return (f"{snapshot.connection.label:>16} | {snapshot.connection.packet_rate:5.1f} pkt/s | "
            f"Bat: {device.battery:3d}% | EEG: {quality:>4} | "
            f"Bad: {snapshot.sensors.bad:2d} | Dominant: {snapshot.band_power.dominant_stable:>6} | "
            f"Valence: {snapshot.emotions.smoothed.valence:+.2f} | State: {state} | "
            f"Stale: {','.join(stale) or '-'}")


def run_monitor(runner: SessionRunner, sender: SnapshotSender,
                duration_s: float = None) -> SessionSnapshot:
    """
    Main real-time loop

    Attaches the runner, publishes a snapshot on every tick, prints status
    periodically and detaches cleanly on shutdown.

    Returns:
        SessionSnapshot: Final state of the session
    """
    last_status_time = 0.0
    status_interval = 2.0  # Print status every 2 seconds

    def publish(snapshot: SessionSnapshot):
        nonlocal last_status_time
        sender.send_snapshot(snapshot)
        current_time = time.time()
        if current_time - last_status_time > status_interval:
            print(format_status(snapshot))
            last_status_time = current_time

    runner.on_tick = publish

    # Graceful shutdown handler
    shutdown_event = Event()
    def signal_handler(signum, frame):
        logging.info("Shutdown signal received")
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    if not runner.attach():
        return None

    try:
        logging.info("Monitoring started. Press Ctrl+C to stop.")
        runner.run(shutdown_event, duration_s=duration_s)
    except Exception as e:
        logging.error(f"Processing error: {e}")
    finally:
        final = runner.detach()
        sender.close()
        logging.info("Monitoring stopped")
    return final


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser"""
    parser = argparse.ArgumentParser(
        description="EEG Monitor - Real-time headset telemetry interpretation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Monitor telemetry forwarded over LSL
  python -m eeg_monitor --source lsl

  # Test with synthetic data, with a 4 s gap every 20 s
  python -m eeg_monitor --fake --dropout-every 20 --dropout-len 4
        """
    )

    # Data source options
    parser.add_argument("--source", choices=["lsl"], default="lsl",
                        help="Telemetry source (default: lsl)")
    parser.add_argument("--fake", action="store_true",
                        help="Use synthetic telemetry for testing")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for synthetic telemetry")
    parser.add_argument("--dropout-every", type=float, default=0.0,
                        help="Synthetic mode: insert a gap every N seconds")
    parser.add_argument("--dropout-len", type=float, default=0.0,
                        help="Synthetic mode: gap length in seconds")

    # Processing parameters
    parser.add_argument("--tick-ms", type=float, default=TICK_INTERVAL_MS,
                        help=f"Tick period in ms (default: {TICK_INTERVAL_MS})")
    parser.add_argument("--cooldown-ms", type=float, default=STATE_CHANGE_COOLDOWN_MS,
                        help=f"Mind state change cooldown in ms (default: {STATE_CHANGE_COOLDOWN_MS})")
    parser.add_argument("--duration", type=float, default=None,
                        help="Stop after N seconds (default: run until Ctrl+C)")

    # Communication options
    parser.add_argument("--udp-host", default=UDP_HOST,
                        help=f"UI UDP host (default: {UDP_HOST})")
    parser.add_argument("--udp-port", type=int, default=UDP_PORT,
                        help=f"UI UDP port (default: {UDP_PORT})")

    # Logging
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose logging")
    parser.add_argument("--debug-packets", action="store_true",
                        help="Log every accepted or discarded packet")

    return parser


def main():
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args()

    # Setup logging
    log_level = logging.DEBUG if (args.verbose or args.debug_packets) else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    print("="*60)
    print("EEG Monitor - Real-time Telemetry Interpretation")
    print("="*60)

    config = EngineConfig(
        state_change_cooldown_ms=args.cooldown_ms,
        debug=args.debug_packets,
    )

    if args.fake:
        logging.info("Using synthetic telemetry")
        source = FakePacketSource(
            seed=args.seed,
            dropout_every_s=args.dropout_every,
            dropout_len_s=args.dropout_len,
        )
    else:
        source = LSLPacketSource()

    store = SessionStore(config)
    runner = SessionRunner(store, source, tick_ms=args.tick_ms)
    sender = SnapshotSender(args.udp_host, args.udp_port)

    try:
        final = run_monitor(runner, sender, duration_s=args.duration)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 0

    if final is None:
        sender.close()
        return 1

    print(format_status(final))
    return 0


if __name__ == "__main__":
    sys.exit(main())
