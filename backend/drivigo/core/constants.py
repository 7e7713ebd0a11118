"""Application-wide constants for the Drivigo platform."""

from __future__ import annotations

BRAND_NAME = "Drivigo"

API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Backend for the Drivigo driving-lesson marketplace"
API_VERSION = "1.0.0"

# Weekday names, ordered as date.weekday() returns them (Monday == 0)
DAYS_OF_WEEK = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

# Bookable one-hour lesson slots
TIME_SLOTS = (
    "07:00-08:00",
    "08:00-09:00",
    "09:00-10:00",
    "16:00-17:00",
    "17:00-18:00",
)

SESSION_PLANS = ("7-day", "14-day")

# Earth mean radius used by the non-PostGIS distance fallback
EARTH_RADIUS_METERS = 6_371_008.8

# Notification channels understood by NotificationService
CHANNEL_PUSH = "push"
CHANNEL_EMAIL = "email"
CHANNEL_SMS = "sms"
NOTIFICATION_CHANNELS = (CHANNEL_PUSH, CHANNEL_EMAIL, CHANNEL_SMS)
DEFAULT_NOTIFICATION_CHANNELS = (CHANNEL_PUSH, CHANNEL_EMAIL)

# Click-through paths for push notifications, keyed by notification type
NOTIFICATION_URLS = {
    "booking_confirmation": "/dashboard",
    "lesson_reminder": "/dashboard",
    "payment_received": "/instructor-earnings",
    "lesson_completion": "/progress",
}
DEFAULT_NOTIFICATION_URL = "/dashboard"

# Template names used by the booking and progress flows
TEMPLATE_BOOKING_CONFIRMATION = "booking_confirmation_email"
TEMPLATE_LESSON_REMINDER = "lesson_reminder_sms"
TEMPLATE_LESSON_COMPLETION = "lesson_completion_push"

# Skills every learner should have practiced a few times before the test
ESSENTIAL_SKILLS = (
    "parallel_parking",
    "highway_driving",
    "reverse_parking",
    "three_point_turn",
)
ESSENTIAL_SKILL_MIN_PRACTICE = 3

# Query limits
DEFAULT_NOTIFICATION_LIMIT = 20
MAX_NOTIFICATION_LIMIT = 100
RECENT_LESSONS_IN_REPORT = 5
DASHBOARD_DAILY_LIMIT = 30
DASHBOARD_RECENT_TRANSACTIONS = 10
ANALYTICS_TOP_STUDENTS = 10

# Realtime
WEBSOCKET_PATH = "/ws"
WS_CLOSE_UNAUTHORIZED = 4401
