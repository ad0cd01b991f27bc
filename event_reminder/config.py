"""
Runtime configuration for the event reminder tool.

Every setting is read from the environment once, at import time, and exposed
as a module-level constant. Defaults are suitable for local development.
"""
from __future__ import annotations

import os


# Persistence
DATA_FILE = os.getenv("EVENT_REMINDER_DATA_FILE", "event_reminder_data.json")
EVENTS_STORAGE_KEY = "eventReminder_events"
THEME_STORAGE_KEY = "eventReminder_theme"
SENT_STORAGE_KEY = "eventReminder_sent"

# Logging
LOG_LEVEL = os.getenv("EVENT_REMINDER_LOG_LEVEL", "INFO")

# Classification and countdown
UPCOMING_WINDOW_DAYS = int(os.getenv("UPCOMING_WINDOW_DAYS", "7"))
REMINDER_LEAD_DAYS = int(os.getenv("REMINDER_LEAD_DAYS", "1"))
COUNTDOWN_INTERVAL_SECONDS = float(os.getenv("COUNTDOWN_INTERVAL_SECONDS", "1.0"))

# Outbound email - any transactional-email API that accepts a JSON POST
EMAIL_API_URL = os.getenv("EMAIL_API_URL", "https://api.emailjs.com/api/v1.0/email/send")
EMAIL_API_KEY = os.getenv("EMAIL_API_KEY", "")
EMAIL_SENDER = os.getenv("EMAIL_SENDER", "reminders@localhost")
EMAIL_RECIPIENT = os.getenv("EMAIL_RECIPIENT", "")
EMAIL_TIMEOUT = float(os.getenv("EMAIL_TIMEOUT", "10.0"))

# Servers
PORT = int(os.getenv("PORT", "8000"))
STATIC_HOST = "127.0.0.1"
STATIC_ROOT = os.getenv("STATIC_ROOT", "web")
REMINDER_SERVICE_PORT = int(os.getenv("REMINDER_SERVICE_PORT", "8003"))
