# File: const.py
"""Constants for the CE Tracker integration.

This file centralizes storage keys, record field names, configuration keys,
defaults, notification types, service names and signal suffixes so that every
module refers to the same literal values.
"""

import logging

import homeassistant.util.dt as dt_util
from homeassistant.const import Platform


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    global DEFAULT_TIME_ZONE
    DEFAULT_TIME_ZONE = dt_util.get_time_zone(hass.config.time_zone)


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
CE_TRACKER_TITLE = "CE Tracker"

DOMAIN = "ce_tracker"

LOGGER = logging.getLogger(__package__)

PLATFORMS = [Platform.SENSOR]

COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

STORAGE_MANAGER = "storage_manager"
STORAGE_KEY = "ce_tracker_data"
STORAGE_VERSION = 1

# Default timezone: initially None, to be set once hass is available.
DEFAULT_TIME_ZONE = None

# ------------------------------------------------------------------------------------------------
# Generic defaults
# ------------------------------------------------------------------------------------------------
DEFAULT_ZERO = 0
DATA_FLOAT_PRECISION = 2
SENTINEL_NO_PERIOD = -1
SENTINEL_EMPTY = ""

# ------------------------------------------------------------------------------------------------
# Measurement units
# ------------------------------------------------------------------------------------------------
UNIT_HOURS = "hours"
UNIT_UNITS = "units"
MEASUREMENT_UNITS = (UNIT_HOURS, UNIT_UNITS)

# Clock hours represented by one CE unit when a credential does not say otherwise.
DEFAULT_HOURS_PER_UNIT = 10.0

# ------------------------------------------------------------------------------------------------
# Storage buckets
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_CREATED = "created"
DATA_CREDENTIALS = "credentials"
DATA_RENEWAL_PERIODS = "renewal_periods"
DATA_ACTIVITIES = "activities"
DATA_SPECIAL_CATEGORIES = "special_categories"
DATA_REINSTATEMENTS = "reinstatements"
DATA_DISCIPLINARY_ACTIONS = "disciplinary_actions"
DATA_AWARDS = "awards"
DATA_NOTIFIED_AWARDS = "notified_awards"

DATA_BUCKETS = (
    DATA_CREDENTIALS,
    DATA_RENEWAL_PERIODS,
    DATA_ACTIVITIES,
    DATA_SPECIAL_CATEGORIES,
    DATA_REINSTATEMENTS,
    DATA_DISCIPLINARY_ACTIONS,
    DATA_AWARDS,
)

# Shared
DATA_INTERNAL_ID = "internal_id"
DATA_NAME = "name"

# Credential
DATA_CREDENTIAL_NAME = "name"
DATA_CREDENTIAL_MEASUREMENT_DEFAULT = "measurement_default"
DATA_CREDENTIAL_HOURS_PER_UNIT = "hours_per_unit"
DATA_CREDENTIAL_REQUIRED_CES = "required_ces"
DATA_CREDENTIAL_SPECIAL_CATEGORY_IDS = "special_category_ids"
DATA_CREDENTIAL_ISSUER_NAME = "issuer_name"

# Renewal period
DATA_RENEWAL_CREDENTIAL_ID = "credential_id"
DATA_RENEWAL_NAME = "name"
DATA_RENEWAL_START = "start"
DATA_RENEWAL_END = "end"
DATA_RENEWAL_APPLICATION_WINDOW_START = "application_window_start"
DATA_RENEWAL_LATE_FEE_DATE = "late_fee_date"
DATA_RENEWAL_LATE_FEE_AMOUNT = "late_fee_amount"
DATA_RENEWAL_COMPLETED = "completed"
DATA_RENEWAL_REINSTATEMENT_ID = "reinstatement_id"

# Activity
DATA_ACTIVITY_TITLE = "title"
DATA_ACTIVITY_AWARDED_AMOUNT = "awarded_amount"
DATA_ACTIVITY_UNIT = "unit"
DATA_ACTIVITY_COMPLETED = "completed"
DATA_ACTIVITY_COMPLETION_DATE = "completion_date"
DATA_ACTIVITY_CREDENTIAL_IDS = "credential_ids"
DATA_ACTIVITY_RENEWAL_PERIOD_ID = "renewal_period_id"
DATA_ACTIVITY_SPECIAL_CATEGORY_ID = "special_category_id"
DATA_ACTIVITY_FOR_REINSTATEMENT = "for_reinstatement"
DATA_ACTIVITY_EXPIRES = "expires"
DATA_ACTIVITY_EXPIRATION_DATE = "expiration_date"
DATA_ACTIVITY_EXPIRATION_REMINDER = "expiration_reminder"
DATA_ACTIVITY_IS_LIVE = "is_live"
DATA_ACTIVITY_START_TIME = "start_time"
DATA_ACTIVITY_CLOCK_HOURS_AWARDED = "clock_hours_awarded"
DATA_ACTIVITY_EVAL_RATING = "eval_rating"

# Special category
DATA_CATEGORY_CREDENTIAL_ID = "credential_id"
DATA_CATEGORY_NAME = "name"
DATA_CATEGORY_REQUIRED_HOURS = "required_hours"
DATA_CATEGORY_MEASUREMENT_DEFAULT = "measurement_default"

# Reinstatement
DATA_REINSTATEMENT_RENEWAL_PERIOD_ID = "renewal_period_id"
DATA_REINSTATEMENT_TOTAL_EXTRA_CES = "total_extra_ces"
DATA_REINSTATEMENT_DEADLINE = "deadline"
DATA_REINSTATEMENT_SPECIAL_CATS = "special_cat_requirements"
DATA_REINSTATEMENT_INTERVIEW_SCHEDULED = "interview_scheduled"
DATA_REINSTATEMENT_ADDITIONAL_TEST_DATE = "additional_test_date"
DATA_RSC_SPECIAL_CATEGORY_ID = "special_category_id"
DATA_RSC_CES_REQUIRED = "ces_required"

# Disciplinary action
DATA_DISCIPLINE_CREDENTIAL_ID = "credential_id"
DATA_DISCIPLINE_NAME = "name"
DATA_DISCIPLINE_ACTION_TYPE = "action_type"
DATA_DISCIPLINE_TEMPORARY_ONLY = "temporary_only"
DATA_DISCIPLINE_END_DATE = "end_date"
DATA_DISCIPLINE_SERVICE_DEADLINE = "community_service_deadline"
DATA_DISCIPLINE_SERVICE_HOURS = "community_service_hours"
DATA_DISCIPLINE_SERVICE_COMPLETED_ON = "community_service_completed_on"
DATA_DISCIPLINE_FINE_DEADLINE = "fine_deadline"
DATA_DISCIPLINE_FINE_AMOUNT = "fine_amount"
DATA_DISCIPLINE_FINE_PAID_ON = "fine_paid_on"
DATA_DISCIPLINE_CE_DEADLINE = "ce_deadline"
DATA_DISCIPLINE_CE_HOURS = "ce_hours"

# Award
DATA_AWARD_NAME = "name"
DATA_AWARD_DESCRIPTION = "description"
DATA_AWARD_NOTIFICATION_TEXT = "notification_text"
DATA_AWARD_CRITERION = "criterion"
DATA_AWARD_VALUE = "value"
DATA_AWARD_DATE_EARNED = "date_earned"

# ------------------------------------------------------------------------------------------------
# Entity (object) types used to qualify reminder keys
# ------------------------------------------------------------------------------------------------
OBJECT_TYPE_ACTIVITY = "activity"
OBJECT_TYPE_RENEWAL = "renewal"
OBJECT_TYPE_DISCIPLINE = "discipline"
OBJECT_TYPE_REINSTATEMENT = "reinstatement"
OBJECT_TYPE_AWARD = "award"

OBJECT_CATEGORY_LIVE = "live"
OBJECT_CATEGORY_NON_LIVE = "non_live"

# ------------------------------------------------------------------------------------------------
# Notification types
# ------------------------------------------------------------------------------------------------
NOTIFICATION_UPCOMING_EXPIRATION = "upcoming_expiration"
NOTIFICATION_RENEWAL_PROCESS_STARTING = "renewal_process_starting"
NOTIFICATION_RENEWAL_ENDING = "renewal_ending"
NOTIFICATION_SIX_MONTH_ALERT = "six_month_alert"
NOTIFICATION_LATE_FEE_STARTING = "late_fee_starting"
NOTIFICATION_LATE_FEE_BEGINS_TODAY = "late_fee_begins_today"
NOTIFICATION_DISCIPLINE_ENDING = "discipline_ending"
NOTIFICATION_SERVICE_DEADLINE = "service_deadline_approaching"
NOTIFICATION_FINE_DEADLINE = "fine_deadline_approaching"
NOTIFICATION_CE_HOURS_DEADLINE = "ce_hours_deadline_approaching"
NOTIFICATION_LIVE_ACTIVITY_STARTING = "live_activity_starting"
NOTIFICATION_REINSTATEMENT_DEADLINE = "reinstatement_deadline"
NOTIFICATION_INTERVIEW = "interview"
NOTIFICATION_ADDITIONAL_TEST_DATE = "additional_test_date"
NOTIFICATION_ACHIEVEMENT_EARNED = "achievement_earned"

# Plan order is also the processing order of a replan.
NOTIFICATION_TYPES = (
    NOTIFICATION_UPCOMING_EXPIRATION,
    NOTIFICATION_LIVE_ACTIVITY_STARTING,
    NOTIFICATION_RENEWAL_PROCESS_STARTING,
    NOTIFICATION_RENEWAL_ENDING,
    NOTIFICATION_SIX_MONTH_ALERT,
    NOTIFICATION_LATE_FEE_STARTING,
    NOTIFICATION_LATE_FEE_BEGINS_TODAY,
    NOTIFICATION_DISCIPLINE_ENDING,
    NOTIFICATION_SERVICE_DEADLINE,
    NOTIFICATION_FINE_DEADLINE,
    NOTIFICATION_CE_HOURS_DEADLINE,
    NOTIFICATION_REINSTATEMENT_DEADLINE,
    NOTIFICATION_INTERVIEW,
    NOTIFICATION_ADDITIONAL_TEST_DATE,
)

# Series index of the first minutes-before entry for live events.
LIVE_SERIES_INDEX_OFFSET = 2

# ------------------------------------------------------------------------------------------------
# Time of day preference
# ------------------------------------------------------------------------------------------------
TIME_OF_DAY_MORNING = "morning"
TIME_OF_DAY_AFTERNOON = "afternoon"
TIME_OF_DAY_EVENING = "evening"

# Hours after local midnight
TIME_OF_DAY_OFFSETS = {
    TIME_OF_DAY_MORNING: 10,
    TIME_OF_DAY_AFTERNOON: 15,
    TIME_OF_DAY_EVENING: 19,
}
TIME_OF_DAY_OPTIONS = list(TIME_OF_DAY_OFFSETS)

# ------------------------------------------------------------------------------------------------
# Scheduling gateway
# ------------------------------------------------------------------------------------------------
AUTH_STATUS_NOT_DETERMINED = "not_determined"
AUTH_STATUS_AUTHORIZED = "authorized"
AUTH_STATUS_DENIED = "denied"

SCHEDULE_RESULT_SCHEDULED = "scheduled"
SCHEDULE_RESULT_SKIPPED_PAST = "skipped_past"
SCHEDULE_RESULT_NOT_AUTHORIZED = "not_authorized"

SCHEDULE_STATE_NOT_SCHEDULED = "not_scheduled"
SCHEDULE_STATE_SCHEDULED = "scheduled"
SCHEDULE_STATE_FIRED = "fired"
SCHEDULE_STATE_CANCELLED = "cancelled"

REPLAN_STATUS_IDLE = "idle"
REPLAN_STATUS_COMPLETE = "complete"
REPLAN_STATUS_NOT_AUTHORIZED = "not_authorized"

NOTIFY_DOMAIN = "notify"
NOTIFY_PERSISTENT_NOTIFICATION = "persistent_notification"
NOTIFY_TITLE = "title"
NOTIFY_MESSAGE = "message"
NOTIFY_DATA = "data"
NOTIFY_TAG = "tag"
NOTIFY_NOTIFICATION_ID = "notification_id"
DISPLAY_DOT = "."

# Seconds between an award being earned and its notification.
AWARD_NOTIFY_DELAY_SECONDS = 30

# ------------------------------------------------------------------------------------------------
# Configuration (options flow)
# ------------------------------------------------------------------------------------------------
CONF_PRIMARY_NOTICE_DAYS = "primary_notice_days"
CONF_SECONDARY_NOTICE_DAYS = "secondary_notice_days"
CONF_LIVE_PRIMARY_MINUTES = "live_primary_minutes"
CONF_LIVE_SECONDARY_MINUTES = "live_secondary_minutes"
CONF_TIME_OF_DAY = "time_of_day"
CONF_ENABLED_NOTIFICATION_TYPES = "enabled_notification_types"
CONF_NOTIFY_SERVICE = "notify_service"
CONF_UPDATE_INTERVAL = "update_interval"

DEFAULT_PRIMARY_NOTICE_DAYS = 30
DEFAULT_SECONDARY_NOTICE_DAYS = 7
DEFAULT_LIVE_PRIMARY_MINUTES = 120
DEFAULT_LIVE_SECONDARY_MINUTES = 30
DEFAULT_TIME_OF_DAY = TIME_OF_DAY_MORNING
DEFAULT_NOTIFY_SERVICE = ""
DEFAULT_UPDATE_INTERVAL = 60

# Reminder lead used for the six month alert custom anchor.
SIX_MONTH_ALERT_MONTHS = 6

# ------------------------------------------------------------------------------------------------
# Awards
# ------------------------------------------------------------------------------------------------
AWARD_CRITERION_CES = "ces"
AWARD_CRITERION_COMPLETED = "completed"
AWARD_CRITERION_LOVED = "loved"
AWARD_CRITERION_HOW_INTERESTING = "how_interesting"

# Activity evaluation scale
EVAL_RATING_INTERESTING = 3
EVAL_RATING_LOVED = 4

DEFAULT_AWARDS = (
    {
        DATA_INTERNAL_ID: "award-first-ce",
        DATA_AWARD_NAME: "First Steps",
        DATA_AWARD_DESCRIPTION: "Complete your first CE activity.",
        DATA_AWARD_NOTIFICATION_TEXT: "You completed your first CE activity!",
        DATA_AWARD_CRITERION: AWARD_CRITERION_COMPLETED,
        DATA_AWARD_VALUE: 1,
    },
    {
        DATA_INTERNAL_ID: "award-ten-activities",
        DATA_AWARD_NAME: "Lifelong Learner",
        DATA_AWARD_DESCRIPTION: "Complete ten CE activities.",
        DATA_AWARD_NOTIFICATION_TEXT: "Ten CE activities completed!",
        DATA_AWARD_CRITERION: AWARD_CRITERION_COMPLETED,
        DATA_AWARD_VALUE: 10,
    },
    {
        DATA_INTERNAL_ID: "award-fifty-hours",
        DATA_AWARD_NAME: "Fifty Hours",
        DATA_AWARD_DESCRIPTION: "Earn fifty clock hours of CE.",
        DATA_AWARD_NOTIFICATION_TEXT: "You have earned fifty hours of CE!",
        DATA_AWARD_CRITERION: AWARD_CRITERION_CES,
        DATA_AWARD_VALUE: 50,
    },
    {
        DATA_INTERNAL_ID: "award-loved-it",
        DATA_AWARD_NAME: "Loved It",
        DATA_AWARD_DESCRIPTION: "Rate an activity as loved.",
        DATA_AWARD_NOTIFICATION_TEXT: "You found an activity you loved!",
        DATA_AWARD_CRITERION: AWARD_CRITERION_LOVED,
        DATA_AWARD_VALUE: 1,
    },
    {
        DATA_INTERNAL_ID: "award-curious-mind",
        DATA_AWARD_NAME: "Curious Mind",
        DATA_AWARD_DESCRIPTION: "Rate five activities as interesting.",
        DATA_AWARD_NOTIFICATION_TEXT: "Five interesting activities completed!",
        DATA_AWARD_CRITERION: AWARD_CRITERION_HOW_INTERESTING,
        DATA_AWARD_VALUE: 5,
    },
)

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_REPLAN_REMINDERS = "replan_reminders"
SERVICE_ASSIGN_ACTIVITIES = "assign_activities"
SERVICE_CHECK_AWARDS = "check_awards"
SERVICE_CANCEL_AWARD_NOTIFICATION = "cancel_award_notification"
SERVICE_GET_COMPLIANCE = "get_compliance"
SERVICE_SAVE_RECORD = "save_record"
SERVICE_DELETE_RECORD = "delete_record"

FIELD_AWARD_ID = "award_id"
FIELD_RENEWAL_PERIOD_ID = "renewal_period_id"
FIELD_BUCKET = "bucket"
FIELD_RECORD = "record"
FIELD_INTERNAL_ID = "internal_id"

SERVICES = (
    SERVICE_REPLAN_REMINDERS,
    SERVICE_ASSIGN_ACTIVITIES,
    SERVICE_CHECK_AWARDS,
    SERVICE_CANCEL_AWARD_NOTIFICATION,
    SERVICE_GET_COMPLIANCE,
    SERVICE_SAVE_RECORD,
    SERVICE_DELETE_RECORD,
)

# Buckets that save_record/delete_record may touch
RECORD_BUCKETS = DATA_BUCKETS

# ------------------------------------------------------------------------------------------------
# Coordinator data / compliance summary keys
# ------------------------------------------------------------------------------------------------
SUMMARY_CREDENTIAL_ID = "credential_id"
SUMMARY_CREDENTIAL_NAME = "credential_name"
SUMMARY_RENEWAL_PERIOD_ID = "renewal_period_id"
SUMMARY_RENEWAL_PERIOD_NAME = "renewal_period_name"
SUMMARY_REMAINING = "remaining"
SUMMARY_EARNED = "earned"
SUMMARY_REQUIRED = "required"
SUMMARY_IS_CURRENT = "is_current"
SUMMARY_UNIT = "unit"
SUMMARY_PROGRESS = "progress"
SUMMARY_SPECIAL_CATEGORIES = "special_categories"
SUMMARY_DAYS_UNTIL_END = "days_until_end"
SUMMARY_REINSTATEMENT = "reinstatement"
SUMMARY_REINSTATEMENT_REQUIRED = "required"
SUMMARY_REINSTATEMENT_EARNED = "earned"
SUMMARY_REINSTATEMENT_CATEGORIES_MET = "categories_met"
SUMMARY_REINSTATEMENT_OUTSTANDING = "outstanding"

COORDINATOR_DATA_SUMMARIES = "summaries"
COORDINATOR_DATA_NEXT_EXPIRATION = "next_expiration"
COORDINATOR_DATA_EARNED_BY_MONTH = "earned_by_month"

# ------------------------------------------------------------------------------------------------
# Events (dispatcher signal suffixes)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_DATA_CHANGED = "data_changed"
SIGNAL_SUFFIX_ACTIVITIES_ASSIGNED = "activities_assigned"
SIGNAL_SUFFIX_REMINDERS_REPLANNED = "reminders_replanned"

# ------------------------------------------------------------------------------------------------
# Sensors
# ------------------------------------------------------------------------------------------------
SENSOR_UID_SUFFIX_COMPLIANCE = "_ce_compliance"
TRANS_KEY_SENSOR_COMPLIANCE = "credential_compliance_sensor"
TRANS_KEY_SENSOR_ATTR_CREDENTIAL_NAME = "credential_name"
ATTR_IS_CURRENT = "is_current"
ATTR_RENEWAL_PERIOD = "renewal_period"
ATTR_SPECIAL_CATEGORIES = "special_categories"
ATTR_DAYS_UNTIL_END = "days_until_end"
ATTR_PROGRESS = "progress_percentage"
ATTR_REINSTATEMENT = "reinstatement"

# ------------------------------------------------------------------------------------------------
# Errors / messages
# ------------------------------------------------------------------------------------------------
MSG_NO_ENTRY_FOUND = "No CE Tracker entry found"
ERROR_AWARD_NOT_FOUND_FMT = "Award '{}' not found"
ERROR_RENEWAL_NOT_FOUND_FMT = "Renewal period '{}' not found"
ERROR_SINGLE_INSTANCE = "single_instance_allowed"

TRANS_KEY_INVALID_NAME = "invalid_name"
TRANS_KEY_INVALID_AMOUNT = "invalid_amount"
TRANS_KEY_INVALID_DATE = "invalid_date"
TRANS_KEY_END_BEFORE_START = "end_before_start"
ERROR_RECORD_NOT_FOUND_FMT = "Record '{}' not found in {}"
ERROR_INVALID_RECORD_FMT = "Invalid {} record: {}"

# ------------------------------------------------------------------------------------------------
# Config / options flow
# ------------------------------------------------------------------------------------------------
CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"
CFOF_TIME_OF_DAY_TRANSLATION_KEY = "time_of_day"
CFOF_NOTIFICATION_TYPES_TRANSLATION_KEY = "notification_types"
DAILY_REPLAN_HOUR = 0
DAILY_REPLAN_MINUTE = 5

# ------------------------------------------------------------------------------------------------
# Sensors (system level)
# ------------------------------------------------------------------------------------------------
SENSOR_UID_SUFFIX_NEXT_EXPIRATION = "_next_renewal_expiration"
TRANS_KEY_SENSOR_NEXT_EXPIRATION = "next_renewal_expiration_sensor"
ATTR_EARNED_BY_MONTH = "earned_by_month"
ATTR_REPLAN_STATUS = "reminder_status"
ATTR_PENDING_REMINDERS = "pending_reminders"
ATTR_NEXT_REMINDER = "next_reminder"
DEVICE_MANUFACTURER = "CE Tracker"
TRANS_KEY_CFOF_SECONDARY_AFTER_PRIMARY = "secondary_after_primary"
TRANS_KEY_CFOF_LIVE_SECONDARY_AFTER_PRIMARY = "live_secondary_after_primary"
TRANS_KEY_CFOF_NOTIFY_SERVICE_NOT_FOUND = "notify_service_not_found"
