"""Outbound notifications for upcoming events."""
