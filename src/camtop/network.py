"""Background network status monitor for camtop."""

import logging
import subprocess
import threading
from collections.abc import Callable

import psutil

from camtop.config import NetworkConfig
from camtop.errors import ConfigError
from camtop.models import NetworkStatus

logger = logging.getLogger(__name__)

Probe = Callable[[], bool]


class StatusCell:
    """
    Single-slot handoff cell for the latest NetworkStatus.

    The producer overwrites the slot, the consumer reads whatever was last
    published. The lock guards only the assignment and the read.
    """

    def __init__(self, initial: NetworkStatus = NetworkStatus.UNKNOWN) -> None:
        self._lock = threading.Lock()
        self._status = initial

    def publish(self, status: NetworkStatus) -> None:
        """Replace the current status."""
        with self._lock:
            self._status = status

    def read(self) -> NetworkStatus:
        """Return the last published status."""
        with self._lock:
            return self._status


def ping_probe(host: str = "8.8.8.8", count: int = 1, timeout: float = 2.0) -> bool:
    """
    Ping a host and report whether it answered.

    A missing ping binary or a hung process counts as unreachable.
    """
    cmd = ["ping", "-c", str(count), "-W", str(max(1, int(round(timeout)))), host]
    try:
        result = subprocess.run(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=timeout * count + 1.0,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.debug("ping to %s timed out", host)
        return False
    except OSError as exc:
        logger.debug("ping could not be run: %s", exc)
        return False
    return result.returncode == 0


def interface_probe() -> bool:
    """Report whether any non-loopback interface is up and has received traffic."""
    stats = psutil.net_if_stats()
    counters = psutil.net_io_counters(pernic=True)
    for name, nic in stats.items():
        if name.startswith("lo"):
            continue
        if not nic.isup:
            continue
        io = counters.get(name)
        if io is not None and io.bytes_recv > 0:
            return True
    return False


def build_probe(config: NetworkConfig) -> Probe:
    """Create the probe named in the network settings."""
    if config.probe == "ping":
        return lambda: ping_probe(config.host, config.count, config.timeout_s)
    if config.probe == "interface":
        return interface_probe
    raise ConfigError(f"unknown network probe {config.probe!r}")


class NetworkMonitor:
    """
    Periodically probes connectivity and publishes the result to a StatusCell.

    Runs in a separate daemon thread. The probe runs outside the cell's lock;
    only the final publish is a critical section. A stop request interrupts
    the wait between cycles.
    """

    def __init__(
        self,
        cell: StatusCell,
        probe: Probe,
        interval: float = 5.0,
    ) -> None:
        """
        Initialize the NetworkMonitor.

        Args:
            cell: Shared cell the status is published to.
            probe: Callable returning True when the network is reachable.
            interval: Seconds between probes. Default 5.0s.
        """
        self._cell = cell
        self._probe = probe
        self._interval = max(0.1, interval)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._cycles = 0

    @property
    def interval(self) -> float:
        """Get the current probe interval."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the probe interval."""
        self._interval = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def cycles(self) -> int:
        """Number of completed probe cycles."""
        return self._cycles

    @property
    def status(self) -> NetworkStatus:
        """Last published status."""
        return self._cell.read()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        # Each run owns its stop event
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._poll_loop,
            args=(self._stop_event,),
            daemon=True,
            name="NetworkMonitor",
        )
        self._thread.start()
        logger.debug("network monitor started, interval %.1fs", self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("network monitor did not stop within %.1fs", timeout or 0.0)
            self._thread = None

    def probe_once(self) -> NetworkStatus:
        """Run one probe and publish its result."""
        try:
            reachable = bool(self._probe())
        except Exception:
            logger.exception("network probe failed")
            reachable = False

        status = NetworkStatus.CONNECTED if reachable else NetworkStatus.DISCONNECTED
        previous = self._cell.read()
        self._cell.publish(status)
        if status is not previous:
            logger.info("network status: %s", status.value)
        self._cycles += 1
        return status

    def _poll_loop(self, stop_event: threading.Event) -> None:
        """Main polling loop running in the background thread."""
        while not stop_event.is_set():
            self.probe_once()

            # Wait for the interval or until stop is requested
            stop_event.wait(timeout=self._interval)
