"""Feature modules, each exposing its own blueprint."""
