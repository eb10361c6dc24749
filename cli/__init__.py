"""Terminal dashboard for the measurement analytics service."""
