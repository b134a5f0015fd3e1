"""System metrics reader for camtop.

CPU usage is derived from the delta between two consecutive aggregate tick
samples; RAM usage from the kernel's memory counters. On Linux both come from
``/proc``; elsewhere psutil supplies the same quantities.
"""

import logging
from pathlib import Path

import psutil

from camtop.errors import MetricsError
from camtop.models import CpuTickSample

logger = logging.getLogger(__name__)

PROC_STAT = Path("/proc/stat")
PROC_MEMINFO = Path("/proc/meminfo")

# Kernel clock ticks per second exposed to userspace
USER_HZ = 100

# user nice system idle iowait irq softirq steal
_CPU_FIELDS = 8
_IDLE_INDEX = 3

# psutil folds guest time into user time already
_PSUTIL_SKIP_FIELDS = ("guest", "guest_nice")


def parse_cpu_line(line: str) -> CpuTickSample:
    """
    Parse the aggregate ``cpu`` line of ``/proc/stat``.

    Missing trailing fields (older kernels) count as zero. Fields past the
    eighth (guest time) are ignored.
    """
    parts = line.split()
    if not parts or parts[0] != "cpu":
        raise MetricsError(f"not an aggregate cpu line: {line!r}")
    if len(parts) < 1 + _IDLE_INDEX + 1:
        raise MetricsError(f"too few cpu fields: {line!r}")
    try:
        values = [int(v) for v in parts[1 : 1 + _CPU_FIELDS]]
    except ValueError as exc:
        raise MetricsError(f"non-integer cpu field: {line!r}") from exc
    values += [0] * (_CPU_FIELDS - len(values))
    return CpuTickSample(total_ticks=sum(values), idle_ticks=values[_IDLE_INDEX])


def parse_meminfo(text: str) -> dict[str, int]:
    """Parse ``/proc/meminfo`` into a mapping of label to kB value."""
    values: dict[str, int] = {}
    for line in text.splitlines():
        label, sep, rest = line.partition(":")
        if not sep:
            continue
        fields = rest.split()
        if not fields:
            continue
        try:
            values[label.strip()] = int(fields[0])
        except ValueError:
            continue  # Malformed line, skip it
    return values


def ram_percent_from_meminfo(values: dict[str, int]) -> float:
    """
    Compute used-memory percentage from meminfo values.

    Prefers ``MemAvailable``; falls back to ``MemFree`` when it is absent or zero.
    """
    total = values.get("MemTotal", 0)
    if total <= 0:
        raise MetricsError("MemTotal missing or zero")
    available = values.get("MemAvailable", 0)
    if available > 0:
        used = total - available
    else:
        used = total - values.get("MemFree", 0)
    return 100.0 * used / total


def cpu_percent_between(previous: CpuTickSample, current: CpuTickSample) -> float | None:
    """
    Compute CPU usage between two tick samples.

    Returns None when the total counter made no progress or went backwards,
    so that the caller can keep its previous value.
    """
    total_delta = current.total_ticks - previous.total_ticks
    if total_delta <= 0:
        return None
    idle_delta = current.idle_ticks - previous.idle_ticks
    usage = 100.0 * (1.0 - idle_delta / total_delta)
    return min(100.0, max(0.0, usage))


class SystemMetricsReader:
    """
    Reads CPU and RAM usage percentages from the operating system.

    Holds the previous CPU tick sample and the last good percentages so that
    unreadable or malformed counters fall back to stale values instead of
    raising into the caller.
    """

    def __init__(
        self,
        stat_path: Path | str = PROC_STAT,
        meminfo_path: Path | str = PROC_MEMINFO,
        use_proc: bool | None = None,
    ) -> None:
        """
        Initialize the SystemMetricsReader.

        Args:
            stat_path: Path of the CPU counter file.
            meminfo_path: Path of the memory counter file.
            use_proc: Force the ``/proc`` files (True) or psutil (False).
                Default picks ``/proc`` when the stat file exists.
        """
        self._stat_path = Path(stat_path)
        self._meminfo_path = Path(meminfo_path)
        self._use_proc = self._stat_path.exists() if use_proc is None else use_proc
        self._cpu_percent = 0.0
        self._ram_percent = 0.0
        self._failing: set[str] = set()
        # Seed the baseline so the first read measures a real interval
        self._prev_sample: CpuTickSample | None = self._try_cpu_sample()

    @property
    def uses_proc(self) -> bool:
        """Whether counters are read from ``/proc`` files."""
        return self._use_proc

    @property
    def cpu_percent(self) -> float:
        """Last computed CPU usage."""
        return self._cpu_percent

    @property
    def ram_percent(self) -> float:
        """Last computed RAM usage."""
        return self._ram_percent

    def read_cpu_sample(self) -> CpuTickSample:
        """Take one aggregate CPU tick sample."""
        if self._use_proc:
            with self._stat_path.open(encoding="ascii") as stat_file:
                return parse_cpu_line(stat_file.readline())

        times = psutil.cpu_times()
        fields = times._asdict()
        total = sum(v for k, v in fields.items() if k not in _PSUTIL_SKIP_FIELDS)
        return CpuTickSample(
            total_ticks=int(round(total * USER_HZ)),
            idle_ticks=int(round(times.idle * USER_HZ)),
        )

    def read_cpu_usage(self) -> float:
        """
        Return CPU usage since the previous call, as a percentage.

        Keeps the last value when the counters cannot be read or did not advance.
        """
        sample = self._try_cpu_sample()
        if sample is None:
            return self._cpu_percent

        previous, self._prev_sample = self._prev_sample, sample
        if previous is None:
            return self._cpu_percent

        usage = cpu_percent_between(previous, sample)
        if usage is not None:
            self._cpu_percent = usage
        return self._cpu_percent

    def read_ram_usage(self) -> float:
        """Return used memory as a percentage, or the last good value on failure."""
        try:
            if self._use_proc:
                values = parse_meminfo(self._meminfo_path.read_text(encoding="ascii"))
                usage = ram_percent_from_meminfo(values)
            else:
                vm = psutil.virtual_memory()
                if vm.total <= 0:
                    raise MetricsError("total memory reported as zero")
                usage = 100.0 * (vm.total - vm.available) / vm.total
        except (OSError, MetricsError, ValueError) as exc:
            self._note_failure("ram", exc)
            return self._ram_percent

        self._note_recovery("ram")
        self._ram_percent = usage
        return usage

    def _try_cpu_sample(self) -> CpuTickSample | None:
        try:
            sample = self.read_cpu_sample()
        except (OSError, MetricsError, ValueError) as exc:
            self._note_failure("cpu", exc)
            return None
        self._note_recovery("cpu")
        return sample

    def _note_failure(self, source: str, exc: Exception) -> None:
        if source not in self._failing:
            self._failing.add(source)
            logger.debug("%s counters unavailable, keeping last value: %s", source, exc)

    def _note_recovery(self, source: str) -> None:
        if source in self._failing:
            self._failing.discard(source)
            logger.debug("%s counters readable again", source)
