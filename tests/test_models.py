"""Tests for camtop data models."""

import pytest

from camtop.models import CpuTickSample, FaceBox, MetricsSnapshot, NetworkStatus


def test_cpu_tick_sample_creation():
    """Test CpuTickSample dataclass creation."""
    sample = CpuTickSample(total_ticks=200, idle_ticks=100)

    assert sample.total_ticks == 200
    assert sample.idle_ticks == 100


def test_cpu_tick_sample_rejects_negative():
    """Test CpuTickSample refuses negative counters."""
    with pytest.raises(ValueError):
        CpuTickSample(total_ticks=-1, idle_ticks=0)


def test_cpu_tick_sample_is_frozen():
    """Test that CpuTickSample is immutable (frozen)."""
    sample = CpuTickSample(total_ticks=1, idle_ticks=1)

    with pytest.raises(AttributeError):
        sample.total_ticks = 999


def test_metrics_snapshot_defaults():
    """Test MetricsSnapshot starts at zero."""
    snapshot = MetricsSnapshot()

    assert snapshot.cpu_percent == 0.0
    assert snapshot.ram_percent == 0.0


def test_metrics_snapshot_uses_slots():
    """Test that MetricsSnapshot uses __slots__."""
    snapshot = MetricsSnapshot(cpu_percent=12.5, ram_percent=40.0)

    # Slots-based dataclasses don't have __dict__
    assert not hasattr(snapshot, "__dict__")


def test_network_status_values():
    """Test NetworkStatus enum carries the display strings."""
    assert NetworkStatus.CONNECTED.value == "Connected"
    assert NetworkStatus.DISCONNECTED.value == "Disconnected"
    assert NetworkStatus.UNKNOWN.value == "Unknown"
    assert len(list(NetworkStatus)) == 3


def test_face_box_corners():
    """Test FaceBox corner helpers."""
    box = FaceBox(x=10, y=20, width=30, height=40)

    assert box.top_left == (10, 20)
    assert box.bottom_right == (40, 60)
