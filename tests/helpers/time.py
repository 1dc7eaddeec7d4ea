"""Shared, deterministic timestamps for tests."""

from datetime import UTC, datetime


# Fixed instant used as "now" by the weather transforms.
# Hourly fixtures straddle it so the next-three-hours window is predictable.
FIXED_NOW = datetime(2024, 8, 2, 10, 30, 0, tzinfo=UTC)
FIXED_NOW_ISO = "2024-08-02T10:30:00.000Z"
