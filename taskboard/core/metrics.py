"""
Prometheus Metrics

Counters and histograms for:
- Board access decisions
- Reminder sweeps and dispatched reminders
"""

from prometheus_client import Counter, Histogram

# ── Access metrics ──────────────────────────────────────────────

ACCESS_DECISIONS_TOTAL = Counter(
    "taskboard_access_decisions_total",
    "Board access resolutions",
    ["entry_point", "outcome"],  # outcome: granted | AccessReason name
)

# ── Reminder metrics ────────────────────────────────────────────

REMINDER_SWEEPS_TOTAL = Counter(
    "taskboard_reminder_sweeps_total",
    "Reminder sweeps started",
    ["trigger"],  # trigger: schedule name | manual
)

REMINDER_SWEEPS_SKIPPED = Counter(
    "taskboard_reminder_sweeps_skipped_total",
    "Reminder ticks skipped because a sweep was already running",
)

REMINDERS_TOTAL = Counter(
    "taskboard_reminders_total",
    "Due reminders by outcome",
    ["outcome"],  # outcome: sent | skipped | failed
)

REMINDER_SWEEP_DURATION = Histogram(
    "taskboard_reminder_sweep_duration_seconds",
    "Duration of one reminder sweep",
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, float("inf")],
)
