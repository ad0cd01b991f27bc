"""Event reminder core: temporal classification, countdowns and the event store."""
