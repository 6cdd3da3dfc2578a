"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_TIMEZONE = "Asia/Kolkata"

CUSTOM_PLAN_ID = "custom"
BALANCE_CLEARANCE_PLAN_ID = "balance_clearance"
BALANCE_CLEARANCE_PLAN_NAME = "Balance Clearance"
DEFAULT_CUSTOM_PLAN_NAME = "Custom Plan"
BALANCE_CLEARANCE_DURATION_DAYS = 1

RENEWAL_REMINDER_DAYS = 7
RECEIPT_PREFIX = "RCP"
RECEIPT_SEQUENCE_DIGITS = 4

DEFAULT_PAGE_SIZE = 20
DEFAULT_ATTENDANCE_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200
MEMBER_DETAIL_PAYMENTS = 10
MEMBER_DETAIL_ATTENDANCE = 30

RATE_LIMIT_MAX = 10
RATE_LIMIT_WINDOW_SECONDS = 60

MIN_PASSWORD_LENGTH = 6

DASHBOARD_PRIORITY_LOOKBACK_DAYS = 30
DASHBOARD_PRIORITY_LIMIT = 10
DASHBOARD_EXPIRING_DAYS = 14
DASHBOARD_EXPIRING_LIMIT = 15

MAX_PLAN_DURATION_DAYS = 3660
MAX_PLAN_NAME_LENGTH = 100
# payments columns are DECIMAL(12, 2)
MAX_PAYMENT_AMOUNT = Decimal("9999999999.99")
