"""Reminder Engine - Pure logic for planning deadline reminders.

This engine provides stateless functions for:
- Type-qualified entity ids and stable reminder keys
- Day-based reminder plans (primary/secondary lead days, custom anchors)
- Live event plans (day-based entries plus minutes-before entries)
- Type-specific plans for expiring activities, renewal periods,
  disciplinary actions, reinstatement milestones and live events
- Award notifications (planned outside the full replan)

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data. Scheduling,
cancellation and authorization belong to the NotificationManager and the
SchedulingGateway.

Key format: "{object_type}:{internal_id}-{notification_type}.{series_index}"

Series indexes:
    1: primary lead (or the only entry for single/custom-anchor plans)
    2: secondary lead
    3: live event, primary minutes before start
    4: live event, secondary minutes before start

Entries whose trigger is not strictly after `now` are dropped.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..type_defs import PlanEntry
from ..utils.dt_utils import (
    as_local,
    days_between,
    dt_at_local_hour,
    dt_format_short,
    dt_parse_date,
    dt_parse_datetime,
)
from ..utils.math_utils import round_ce
from .period_engine import PeriodEngine

if TYPE_CHECKING:
    from ..type_defs import (
        ActivityData,
        AwardData,
        CredentialData,
        DataSnapshot,
        DisciplinaryActionData,
        ReinstatementData,
        RenewalPeriodData,
    )

DAYS_PLACEHOLDER = "{days}"
MINUTES_PLACEHOLDER = "{minutes}"


# =============================================================================
# SETTINGS
# =============================================================================


def _coerce_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class ReminderSettings:
    """User reminder preferences with defaults applied.

    Built once per replan from config entry options so that every planner
    sees the same resolved values.
    """

    primary_notice_days: int = const.DEFAULT_PRIMARY_NOTICE_DAYS
    secondary_notice_days: int = const.DEFAULT_SECONDARY_NOTICE_DAYS
    live_primary_minutes: int = const.DEFAULT_LIVE_PRIMARY_MINUTES
    live_secondary_minutes: int = const.DEFAULT_LIVE_SECONDARY_MINUTES
    time_of_day: str = const.DEFAULT_TIME_OF_DAY
    enabled_types: frozenset[str] = field(
        default_factory=lambda: frozenset(const.NOTIFICATION_TYPES)
    )

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> ReminderSettings:
        """Resolve settings from config entry options."""
        time_of_day = options.get(const.CONF_TIME_OF_DAY, const.DEFAULT_TIME_OF_DAY)
        if time_of_day not in const.TIME_OF_DAY_OFFSETS:
            time_of_day = const.DEFAULT_TIME_OF_DAY

        enabled = options.get(const.CONF_ENABLED_NOTIFICATION_TYPES)
        enabled_types = (
            frozenset(const.NOTIFICATION_TYPES)
            if enabled is None
            else frozenset(enabled) & frozenset(const.NOTIFICATION_TYPES)
        )

        return cls(
            primary_notice_days=_coerce_int(
                options.get(const.CONF_PRIMARY_NOTICE_DAYS),
                const.DEFAULT_PRIMARY_NOTICE_DAYS,
            ),
            secondary_notice_days=_coerce_int(
                options.get(const.CONF_SECONDARY_NOTICE_DAYS),
                const.DEFAULT_SECONDARY_NOTICE_DAYS,
            ),
            live_primary_minutes=_coerce_int(
                options.get(const.CONF_LIVE_PRIMARY_MINUTES),
                const.DEFAULT_LIVE_PRIMARY_MINUTES,
            ),
            live_secondary_minutes=_coerce_int(
                options.get(const.CONF_LIVE_SECONDARY_MINUTES),
                const.DEFAULT_LIVE_SECONDARY_MINUTES,
            ),
            time_of_day=time_of_day,
            enabled_types=enabled_types,
        )

    def is_enabled(self, notification_type: str) -> bool:
        """Return True if reminders of this type should be planned."""
        return notification_type in self.enabled_types


# =============================================================================
# REMINDER ENGINE
# =============================================================================


class ReminderEngine:
    """Pure logic engine for reminder planning.

    All methods are static - no instance state. Planning only moves entities
    from not-scheduled to scheduled; firing and cancelling are the gateway's.
    """

    # =========================================================================
    # KEYS
    # =========================================================================

    @staticmethod
    def build_entity_uid(object_type: str, internal_id: str) -> str:
        """Return the type-qualified id used as the key prefix."""
        return f"{object_type}:{internal_id}"

    @staticmethod
    def build_stable_key(
        entity_uid: str, notification_type: str, series_index: int
    ) -> str:
        """Return the deterministic reminder key."""
        return f"{entity_uid}-{notification_type}.{series_index}"

    # =========================================================================
    # GENERIC PLANNERS
    # =========================================================================

    @staticmethod
    def trigger_for(day: date, time_of_day: str) -> datetime:
        """Local wall-clock trigger on `day` at the preferred time of day."""
        hour = const.TIME_OF_DAY_OFFSETS.get(
            time_of_day, const.TIME_OF_DAY_OFFSETS[const.DEFAULT_TIME_OF_DAY]
        )
        return dt_at_local_hour(day, hour)

    @staticmethod
    def plan_day_based(
        entity_uid: str,
        notification_type: str,
        title: str,
        body: str,
        anchor_date: date,
        lead_days_primary: int,
        lead_days_secondary: int,
        time_of_day: str,
        now: datetime,
        single_only: bool = False,
        custom_anchor: date | None = None,
    ) -> list[PlanEntry]:
        """Plan one or two reminders ahead of an anchor date.

        Each trigger lands `lead_days` before the anchor day at the preferred
        time of day. A custom anchor replaces the lead with the distance
        between the two days and always yields a single entry. A "{days}"
        placeholder in `body` is replaced by the entry's lead.
        """
        if custom_anchor is not None:
            leads = [days_between(custom_anchor, anchor_date)]
        elif single_only:
            leads = [lead_days_primary]
        else:
            leads = [lead_days_primary, lead_days_secondary]

        entries: list[PlanEntry] = []
        for series_index, lead in enumerate(leads, start=1):
            if lead < 0:
                continue
            trigger = ReminderEngine.trigger_for(
                anchor_date - timedelta(days=lead), time_of_day
            )
            if trigger <= now:
                continue
            entries.append(
                PlanEntry(
                    stable_key=ReminderEngine.build_stable_key(
                        entity_uid, notification_type, series_index
                    ),
                    title=title,
                    body=body.replace(DAYS_PLACEHOLDER, str(lead)),
                    trigger_time=trigger,
                    series_index=series_index,
                    notification_type=notification_type,
                )
            )
        return entries

    @staticmethod
    def plan_live_event(
        entity_uid: str,
        event_time: datetime,
        lead_minutes_primary: int,
        lead_minutes_secondary: int,
        day_title: str,
        day_body: str,
        time_title: str,
        time_body: str,
        settings: ReminderSettings,
        now: datetime,
    ) -> list[PlanEntry]:
        """Plan day-based reminders plus minutes-before reminders for an event.

        Non-positive minute leads disable that entry.
        """
        notification_type = const.NOTIFICATION_LIVE_ACTIVITY_STARTING
        entries = ReminderEngine.plan_day_based(
            entity_uid,
            notification_type,
            day_title,
            day_body,
            as_local(event_time).date(),
            settings.primary_notice_days,
            settings.secondary_notice_days,
            settings.time_of_day,
            now,
        )

        for offset, minutes in enumerate(
            (lead_minutes_primary, lead_minutes_secondary), start=1
        ):
            if minutes <= 0:
                continue
            trigger = event_time - timedelta(minutes=minutes)
            if trigger <= now:
                continue
            series_index = const.LIVE_SERIES_INDEX_OFFSET + offset
            entries.append(
                PlanEntry(
                    stable_key=ReminderEngine.build_stable_key(
                        entity_uid, notification_type, series_index
                    ),
                    title=time_title,
                    body=time_body.replace(MINUTES_PLACEHOLDER, str(minutes)),
                    trigger_time=trigger,
                    series_index=series_index,
                    notification_type=notification_type,
                )
            )
        return entries

    # =========================================================================
    # ACTIVITIES
    # =========================================================================

    @staticmethod
    def plan_expiring_activities(
        activities: Iterable[ActivityData],
        settings: ReminderSettings,
        now: datetime,
    ) -> list[PlanEntry]:
        """Reminders for incomplete activities that expire in the future."""
        today = as_local(now).date()
        entries: list[PlanEntry] = []
        for activity in activities:
            expiration = dt_parse_date(activity.get(const.DATA_ACTIVITY_EXPIRATION_DATE))
            if (
                not activity.get(const.DATA_ACTIVITY_EXPIRES)
                or not activity.get(const.DATA_ACTIVITY_EXPIRATION_REMINDER)
                or activity.get(const.DATA_ACTIVITY_COMPLETED)
                or expiration is None
                or expiration <= today
            ):
                continue
            entries.extend(
                ReminderEngine.plan_day_based(
                    ReminderEngine.build_entity_uid(
                        const.OBJECT_TYPE_ACTIVITY, activity[const.DATA_INTERNAL_ID]
                    ),
                    const.NOTIFICATION_UPCOMING_EXPIRATION,
                    activity[const.DATA_ACTIVITY_TITLE],
                    "This CE activity expires in {days} day(s). Complete it before "
                    "then if you want it to count for the current renewal period.",
                    expiration,
                    settings.primary_notice_days,
                    settings.secondary_notice_days,
                    settings.time_of_day,
                    now,
                )
            )
        return entries

    @staticmethod
    def plan_live_events(
        activities: Iterable[ActivityData],
        settings: ReminderSettings,
        now: datetime,
    ) -> list[PlanEntry]:
        """Reminders for upcoming live activities that are not completed."""
        entries: list[PlanEntry] = []
        for activity in activities:
            start = dt_parse_datetime(activity.get(const.DATA_ACTIVITY_START_TIME))
            if (
                not activity.get(const.DATA_ACTIVITY_IS_LIVE)
                or activity.get(const.DATA_ACTIVITY_COMPLETED)
                or start is None
                or start <= now
            ):
                continue
            title = activity[const.DATA_ACTIVITY_TITLE]
            entries.extend(
                ReminderEngine.plan_live_event(
                    ReminderEngine.build_entity_uid(
                        const.OBJECT_CATEGORY_LIVE, activity[const.DATA_INTERNAL_ID]
                    ),
                    start,
                    settings.live_primary_minutes,
                    settings.live_secondary_minutes,
                    f"{title} is coming up",
                    f"{title} starts in {{days}} day(s) on {dt_format_short(start)}.",
                    f"{title} starts soon",
                    f"{title} starts in {{minutes}} minutes.",
                    settings,
                    now,
                )
            )
        return entries

    # =========================================================================
    # RENEWAL PERIODS
    # =========================================================================

    @staticmethod
    def plan_renewal_periods(
        periods: Iterable[RenewalPeriodData],
        credentials: Mapping[str, CredentialData],
        settings: ReminderSettings,
        now: datetime,
    ) -> list[PlanEntry]:
        """Reminders for current renewal periods.

        Covers the period end, the application window opening, the six month
        alert, the late fee approaching and the day the late fee begins.
        """
        today = as_local(now).date()
        entries: list[PlanEntry] = []
        for period in PeriodEngine.current_periods(periods, today):
            credential = credentials.get(period[const.DATA_RENEWAL_CREDENTIAL_ID])
            cred_name = (
                credential[const.DATA_CREDENTIAL_NAME] if credential else "your credential"
            )
            period_name = period[const.DATA_RENEWAL_NAME]
            uid = ReminderEngine.build_entity_uid(
                const.OBJECT_TYPE_RENEWAL, period[const.DATA_INTERNAL_ID]
            )
            end = dt_parse_date(period[const.DATA_RENEWAL_END])
            if end is None:
                continue

            entries.extend(
                ReminderEngine.plan_day_based(
                    uid,
                    const.NOTIFICATION_RENEWAL_ENDING,
                    f"The {period_name} for {cred_name} ends soon!",
                    "You have {days} day(s) left before your credential expires "
                    "if you haven't renewed yet.",
                    end,
                    settings.primary_notice_days,
                    settings.secondary_notice_days,
                    settings.time_of_day,
                    now,
                )
            )

            window_start = dt_parse_date(
                period.get(const.DATA_RENEWAL_APPLICATION_WINDOW_START)
            )
            if window_start is not None:
                entries.extend(
                    ReminderEngine.plan_day_based(
                        uid,
                        const.NOTIFICATION_RENEWAL_PROCESS_STARTING,
                        f"Renewal for {cred_name} opens soon",
                        "The renewal application window opens in {days} day(s).",
                        window_start,
                        settings.primary_notice_days,
                        settings.secondary_notice_days,
                        settings.time_of_day,
                        now,
                    )
                )

            alert_day = PeriodEngine.months_before_period_end(
                period, const.SIX_MONTH_ALERT_MONTHS
            )
            if alert_day is not None:
                entries.extend(
                    ReminderEngine.plan_day_based(
                        uid,
                        const.NOTIFICATION_SIX_MONTH_ALERT,
                        f"Six months left in the {period_name}",
                        f"Your {cred_name} renewal period ends on "
                        f"{dt_format_short(end)}. Check your remaining CE.",
                        end,
                        settings.primary_notice_days,
                        settings.secondary_notice_days,
                        settings.time_of_day,
                        now,
                        custom_anchor=alert_day,
                    )
                )

            late_fee_date = dt_parse_date(period.get(const.DATA_RENEWAL_LATE_FEE_DATE))
            late_fee = period.get(const.DATA_RENEWAL_LATE_FEE_AMOUNT, 0.0)
            if late_fee_date is None or late_fee <= 0:
                continue
            entries.extend(
                ReminderEngine.plan_day_based(
                    uid,
                    const.NOTIFICATION_LATE_FEE_STARTING,
                    f"The late fee for the {period_name} approaches!",
                    f"You have {{days}} day(s) left before renewing your {cred_name} "
                    f"costs {round_ce(late_fee)} extra. Renew soon!",
                    late_fee_date,
                    settings.primary_notice_days,
                    settings.secondary_notice_days,
                    settings.time_of_day,
                    now,
                )
            )
            entries.extend(
                ReminderEngine.plan_day_based(
                    uid,
                    const.NOTIFICATION_LATE_FEE_BEGINS_TODAY,
                    f"The late fee for {cred_name} starts today",
                    f"Renewing the {period_name} now costs {round_ce(late_fee)} extra.",
                    late_fee_date,
                    0,
                    0,
                    settings.time_of_day,
                    now,
                    single_only=True,
                )
            )
        return entries

    # =========================================================================
    # DISCIPLINARY ACTIONS
    # =========================================================================

    @staticmethod
    def is_action_active(action: DisciplinaryActionData, today: date) -> bool:
        """Permanent actions are always active; temporary ones until they end."""
        if not action.get(const.DATA_DISCIPLINE_TEMPORARY_ONLY):
            return True
        end = dt_parse_date(action.get(const.DATA_DISCIPLINE_END_DATE))
        return end is not None and end >= today

    @staticmethod
    def plan_disciplinary_actions(
        actions: Iterable[DisciplinaryActionData],
        credentials: Mapping[str, CredentialData],
        settings: ReminderSettings,
        now: datetime,
    ) -> list[PlanEntry]:
        """Reminders for the end of a sanction and its outstanding deadlines."""
        today = as_local(now).date()
        entries: list[PlanEntry] = []
        for action in actions:
            if not ReminderEngine.is_action_active(action, today):
                continue
            credential = credentials.get(action[const.DATA_DISCIPLINE_CREDENTIAL_ID])
            cred_name = (
                credential[const.DATA_CREDENTIAL_NAME] if credential else "your credential"
            )
            issuer = (
                credential.get(const.DATA_CREDENTIAL_ISSUER_NAME) if credential else ""
            ) or "governing body"
            uid = ReminderEngine.build_entity_uid(
                const.OBJECT_TYPE_DISCIPLINE, action[const.DATA_INTERNAL_ID]
            )
            action_name = action[const.DATA_DISCIPLINE_NAME]
            action_type = action.get(const.DATA_DISCIPLINE_ACTION_TYPE) or "sanction"

            plans: list[tuple[str, str, str, date | None]] = []
            end = dt_parse_date(action.get(const.DATA_DISCIPLINE_END_DATE))
            if end is not None and end > today:
                plans.append(
                    (
                        const.NOTIFICATION_DISCIPLINE_ENDING,
                        f"The {action_name} for {cred_name} ends soon!",
                        f"You have {{days}} day(s) left before the {action_type} "
                        "period ends. Make sure every required action is complete.",
                        end,
                    )
                )
            service_deadline = dt_parse_date(
                action.get(const.DATA_DISCIPLINE_SERVICE_DEADLINE)
            )
            if (
                service_deadline is not None
                and service_deadline > today
                and not action.get(const.DATA_DISCIPLINE_SERVICE_COMPLETED_ON)
            ):
                hours = round_ce(action.get(const.DATA_DISCIPLINE_SERVICE_HOURS, 0.0))
                plans.append(
                    (
                        const.NOTIFICATION_SERVICE_DEADLINE,
                        "Community service hours due soon!",
                        f"You have {{days}} day(s) left to complete {hours} hours "
                        "of community service.",
                        service_deadline,
                    )
                )
            fine_deadline = dt_parse_date(action.get(const.DATA_DISCIPLINE_FINE_DEADLINE))
            if fine_deadline is not None and not action.get(
                const.DATA_DISCIPLINE_FINE_PAID_ON
            ):
                fine = round_ce(action.get(const.DATA_DISCIPLINE_FINE_AMOUNT, 0.0))
                plans.append(
                    (
                        const.NOTIFICATION_FINE_DEADLINE,
                        "Fine due soon!",
                        f"You have {{days}} day(s) left to pay the {fine} fine "
                        f"owed to the {issuer}.",
                        fine_deadline,
                    )
                )
            ce_deadline = dt_parse_date(action.get(const.DATA_DISCIPLINE_CE_DEADLINE))
            if ce_deadline is not None and ce_deadline > today:
                ce_hours = round_ce(action.get(const.DATA_DISCIPLINE_CE_HOURS, 0.0))
                plans.append(
                    (
                        const.NOTIFICATION_CE_HOURS_DEADLINE,
                        "Mandated CE hours due soon!",
                        f"You have {{days}} day(s) left to complete {ce_hours} "
                        f"mandated CE hours for your {cred_name}.",
                        ce_deadline,
                    )
                )

            for notification_type, title, body, anchor in plans:
                entries.extend(
                    ReminderEngine.plan_day_based(
                        uid,
                        notification_type,
                        title,
                        body,
                        anchor,  # type: ignore[arg-type]
                        settings.primary_notice_days,
                        settings.secondary_notice_days,
                        settings.time_of_day,
                        now,
                    )
                )
        return entries

    # =========================================================================
    # REINSTATEMENT
    # =========================================================================

    @staticmethod
    def plan_reinstatements(
        reinstatements: Iterable[ReinstatementData],
        periods: Mapping[str, RenewalPeriodData],
        credentials: Mapping[str, CredentialData],
        settings: ReminderSettings,
        now: datetime,
    ) -> list[PlanEntry]:
        """Reminders for the reinstatement deadline, interview and extra test."""
        entries: list[PlanEntry] = []
        for reinstatement in reinstatements:
            period = periods.get(
                reinstatement[const.DATA_REINSTATEMENT_RENEWAL_PERIOD_ID]
            )
            credential = (
                credentials.get(period[const.DATA_RENEWAL_CREDENTIAL_ID])
                if period
                else None
            )
            cred_name = (
                credential[const.DATA_CREDENTIAL_NAME] if credential else "your credential"
            )
            uid = ReminderEngine.build_entity_uid(
                const.OBJECT_TYPE_REINSTATEMENT, reinstatement[const.DATA_INTERNAL_ID]
            )

            plans: list[tuple[str, str, str, date]] = []
            deadline = dt_parse_date(reinstatement.get(const.DATA_REINSTATEMENT_DEADLINE))
            if deadline is not None:
                plans.append(
                    (
                        const.NOTIFICATION_REINSTATEMENT_DEADLINE,
                        f"Reinstatement deadline for {cred_name} approaches",
                        "You have {days} day(s) left to finish the requirements "
                        "for reinstating your credential.",
                        deadline,
                    )
                )
            interview = dt_parse_datetime(
                reinstatement.get(const.DATA_REINSTATEMENT_INTERVIEW_SCHEDULED)
            )
            if interview is not None:
                plans.append(
                    (
                        const.NOTIFICATION_INTERVIEW,
                        f"Reinstatement interview for {cred_name}",
                        "Your reinstatement interview is in {days} day(s) on "
                        f"{dt_format_short(interview)}.",
                        as_local(interview).date(),
                    )
                )
            test_date = dt_parse_datetime(
                reinstatement.get(const.DATA_REINSTATEMENT_ADDITIONAL_TEST_DATE)
            )
            if test_date is not None:
                plans.append(
                    (
                        const.NOTIFICATION_ADDITIONAL_TEST_DATE,
                        f"Reinstatement exam for {cred_name}",
                        "Your additional test is in {days} day(s) on "
                        f"{dt_format_short(test_date)}.",
                        as_local(test_date).date(),
                    )
                )

            for notification_type, title, body, anchor in plans:
                entries.extend(
                    ReminderEngine.plan_day_based(
                        uid,
                        notification_type,
                        title,
                        body,
                        anchor,
                        settings.primary_notice_days,
                        settings.secondary_notice_days,
                        settings.time_of_day,
                        now,
                    )
                )
        return entries

    # =========================================================================
    # FULL PLAN
    # =========================================================================

    @staticmethod
    def plan_all(
        snapshot: DataSnapshot,
        settings: ReminderSettings,
        now: datetime,
    ) -> list[PlanEntry]:
        """Plan every reminder type in a fixed order.

        Disabled notification types are filtered out and entries are
        deduplicated by stable key (first wins), so the same snapshot always
        produces the same list.
        """
        activities = list(snapshot[const.DATA_ACTIVITIES].values())
        credentials = snapshot[const.DATA_CREDENTIALS]
        periods = snapshot[const.DATA_RENEWAL_PERIODS]

        planned = [
            *ReminderEngine.plan_expiring_activities(activities, settings, now),
            *ReminderEngine.plan_live_events(activities, settings, now),
            *ReminderEngine.plan_renewal_periods(
                periods.values(), credentials, settings, now
            ),
            *ReminderEngine.plan_disciplinary_actions(
                snapshot[const.DATA_DISCIPLINARY_ACTIONS].values(),
                credentials,
                settings,
                now,
            ),
            *ReminderEngine.plan_reinstatements(
                snapshot[const.DATA_REINSTATEMENTS].values(),
                periods,
                credentials,
                settings,
                now,
            ),
        ]

        seen: set[str] = set()
        entries: list[PlanEntry] = []
        for entry in planned:
            if not settings.is_enabled(entry.notification_type):
                continue
            if entry.stable_key in seen:
                continue
            seen.add(entry.stable_key)
            entries.append(entry)
        return entries

    # =========================================================================
    # AWARDS
    # =========================================================================

    @staticmethod
    def plan_award(award: AwardData, now: datetime) -> PlanEntry:
        """Plan the notification for a newly earned award."""
        uid = ReminderEngine.build_entity_uid(
            const.OBJECT_TYPE_AWARD, award[const.DATA_INTERNAL_ID]
        )
        return PlanEntry(
            stable_key=ReminderEngine.build_stable_key(
                uid, const.NOTIFICATION_ACHIEVEMENT_EARNED, 1
            ),
            title=f"Award earned: {award[const.DATA_AWARD_NAME]}",
            body=award.get(const.DATA_AWARD_NOTIFICATION_TEXT)
            or award.get(const.DATA_AWARD_DESCRIPTION, ""),
            trigger_time=now + timedelta(seconds=const.AWARD_NOTIFY_DELAY_SECONDS),
            series_index=1,
            notification_type=const.NOTIFICATION_ACHIEVEMENT_EARNED,
        )
