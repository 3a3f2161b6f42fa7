"""Constants for the MBTA v3 API.

API Documentation: https://api-v3.mbta.com/docs/swagger/index.html
"""

MBTA_BASE_URL = "https://api-v3.mbta.com"
MBTA_PREDICTIONS_URL = f"{MBTA_BASE_URL}/predictions"
MBTA_SCHEDULES_URL = f"{MBTA_BASE_URL}/schedules"
MBTA_ALERTS_URL = f"{MBTA_BASE_URL}/alerts"

MBTA_ACCEPT_HEADER = "application/vnd.api+json"
MBTA_ALERT_ACTIVITIES = "BOARD,EXIT,RIDE"
MBTA_TIMEZONE = "America/New_York"

# Predictions for stops the train will not serve
SKIPPED_RELATIONSHIPS = {"SKIPPED", "CANCELLED", "NO_DATA"}
