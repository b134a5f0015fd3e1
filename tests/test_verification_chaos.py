"""Verification Test: Chaos Monkey - flaky probe resilience.

The monitor must keep running and keep publishing well-formed statuses while
its probe randomly fails, raises and stalls, and readers hammer the cell.
"""

import random
import threading
import time

from camtop.models import NetworkStatus
from camtop.network import NetworkMonitor, StatusCell


class TestChaosMonkey:
    """Chaos Monkey verification suite tests."""

    def test_monitor_survives_flaky_probe(self):
        """
        Test that the monitor doesn't die when the probe misbehaves.

        The probe randomly succeeds, fails, raises or sleeps; the monitor must
        map every outcome to a status and keep cycling.
        """
        rng = random.Random(1234)

        def chaos_probe() -> bool:
            roll = rng.random()
            if roll < 0.25:
                raise OSError("network unreachable")
            if roll < 0.4:
                time.sleep(0.05)
            return roll < 0.7

        cell = StatusCell()
        monitor = NetworkMonitor(cell, chaos_probe, interval=0.1)

        observed: list[NetworkStatus] = []
        stop = threading.Event()

        def hammer() -> None:
            while not stop.is_set():
                observed.append(cell.read())

        readers = [threading.Thread(target=hammer) for _ in range(3)]
        monitor.start()
        for r in readers:
            r.start()

        try:
            deadline = time.monotonic() + 5.0
            while monitor.cycles < 15 and time.monotonic() < deadline:
                time.sleep(0.05)

            assert monitor.cycles >= 15, f"Expected at least 15 cycles, got {monitor.cycles}"
            assert monitor.is_running, "Monitor should still be running after chaos"
        finally:
            stop.set()
            for r in readers:
                r.join(timeout=2.0)
            monitor.stop()

        assert observed
        assert all(isinstance(status, NetworkStatus) for status in observed)
        assert cell.read() in (NetworkStatus.CONNECTED, NetworkStatus.DISCONNECTED)
