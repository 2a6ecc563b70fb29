from __future__ import annotations

from prometheus_client import Counter

# Mission counters
mission_toggles_total = Counter(
    "missiontracker_mission_toggles_total",
    "Total mission completion toggles",
    labelnames=("completed",),
)

# Account counters
registrations_total = Counter(
    "missiontracker_registrations_total",
    "Total successful registrations",
)
login_failures_total = Counter(
    "missiontracker_login_failures_total",
    "Total rejected login attempts",
)
