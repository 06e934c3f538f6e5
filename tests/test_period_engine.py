"""Tests for PeriodEngine - pure logic, no HA fixtures needed.

These tests validate renewal period membership, activity assignment and
time-until-expiration lookups.
"""

from __future__ import annotations

from datetime import date

from custom_components.ce_tracker import const
from custom_components.ce_tracker.engines.period_engine import PeriodEngine
from tests.helpers import make_activity, make_renewal

JAN_1 = date(2026, 1, 1)
DEC_31 = date(2026, 12, 31)


def _period(period_id: str, start: date, end: date, credential_id: str = "cred-1"):
    return make_renewal(
        start,
        end,
        **{
            const.DATA_INTERNAL_ID: period_id,
            const.DATA_RENEWAL_CREDENTIAL_ID: credential_id,
            const.DATA_RENEWAL_NAME: period_id,
        },
    )


# =============================================================================
# TEST: MEMBERSHIP
# =============================================================================


class TestMembership:
    """Test closed-interval membership."""

    def test_bounds_are_inclusive(self) -> None:
        """Start and end dates both belong to the period."""
        period = _period("rp-1", JAN_1, DEC_31)
        assert PeriodEngine.contains(period, JAN_1)
        assert PeriodEngine.contains(period, DEC_31)
        assert not PeriodEngine.contains(period, date(2027, 1, 1))

    def test_find_period_single_match(self) -> None:
        """The only containing period is returned."""
        periods = [
            _period("rp-old", date(2024, 1, 1), date(2025, 12, 31)),
            _period("rp-new", JAN_1, DEC_31),
        ]
        found = PeriodEngine.find_period_for_date(periods, date(2026, 6, 1))
        assert found is not None
        assert found[const.DATA_INTERNAL_ID] == "rp-new"

    def test_find_period_no_match(self) -> None:
        """No containing period yields None."""
        periods = [_period("rp-1", JAN_1, DEC_31)]
        assert PeriodEngine.find_period_for_date(periods, date(2030, 1, 1)) is None

    def test_find_period_overlap_is_ambiguous(self) -> None:
        """Two overlapping matches yield None."""
        periods = [
            _period("rp-a", JAN_1, DEC_31),
            _period("rp-b", date(2026, 6, 1), date(2027, 5, 31)),
        ]
        assert PeriodEngine.find_period_for_date(periods, date(2026, 7, 1)) is None

    def test_is_period_current(self) -> None:
        """Currency follows membership of `as_of`."""
        period = _period("rp-1", JAN_1, DEC_31)
        assert PeriodEngine.is_period_current(period, [period], date(2026, 5, 5))
        assert not PeriodEngine.is_period_current(period, [period], date(2027, 5, 5))

    def test_period_ended_yesterday_not_current(self) -> None:
        """A period whose end was yesterday is not among the current ones."""
        today = date(2027, 1, 1)
        ended = _period("rp-1", JAN_1, DEC_31)
        upcoming = _period("rp-2", today, date(2027, 12, 31))
        current = PeriodEngine.current_periods([ended, upcoming], today)
        assert [p[const.DATA_INTERNAL_ID] for p in current] == ["rp-2"]


# =============================================================================
# TEST: ACTIVITY ASSIGNMENT
# =============================================================================


class TestAssignment:
    """Test linking completed activities to periods."""

    def test_completed_activity_assigned(self) -> None:
        """A completed activity links to the period containing its date."""
        grouped = PeriodEngine.group_by_credential([_period("rp-1", JAN_1, DEC_31)])
        activity = make_activity(
            **{const.DATA_ACTIVITY_COMPLETION_DATE: date(2026, 3, 15)}
        )
        assert PeriodEngine.assign_activity_to_period(activity, grouped) == "rp-1"

    def test_incomplete_activity_not_assigned(self) -> None:
        """Incomplete activities are never linked."""
        grouped = PeriodEngine.group_by_credential([_period("rp-1", JAN_1, DEC_31)])
        activity = make_activity(
            **{
                const.DATA_ACTIVITY_COMPLETED: False,
                const.DATA_ACTIVITY_COMPLETION_DATE: date(2026, 3, 15),
            }
        )
        assert PeriodEngine.assign_activity_to_period(activity, grouped) is None

    def test_missing_completion_date_not_assigned(self) -> None:
        """A completed activity without a date stays unlinked."""
        grouped = PeriodEngine.group_by_credential([_period("rp-1", JAN_1, DEC_31)])
        assert PeriodEngine.assign_activity_to_period(make_activity(), grouped) is None

    def test_first_matching_credential_wins(self) -> None:
        """Credentials are checked in the activity's order."""
        grouped = PeriodEngine.group_by_credential(
            [
                _period("rp-cred-2", JAN_1, DEC_31, credential_id="cred-2"),
                _period("rp-cred-3", JAN_1, DEC_31, credential_id="cred-3"),
            ]
        )
        activity = make_activity(
            **{
                const.DATA_ACTIVITY_CREDENTIAL_IDS: ["cred-1", "cred-3", "cred-2"],
                const.DATA_ACTIVITY_COMPLETION_DATE: date(2026, 3, 15),
            }
        )
        assert PeriodEngine.assign_activity_to_period(activity, grouped) == "rp-cred-3"

    def test_bulk_assignment_is_idempotent(self) -> None:
        """Re-running over the same data yields the same map."""
        grouped = PeriodEngine.group_by_credential([_period("rp-1", JAN_1, DEC_31)])
        activities = [
            make_activity(**{const.DATA_ACTIVITY_COMPLETION_DATE: date(2026, 3, 15)}),
            make_activity(
                **{
                    const.DATA_INTERNAL_ID: "act-2",
                    const.DATA_ACTIVITY_COMPLETION_DATE: date(2030, 1, 1),
                }
            ),
        ]
        first = PeriodEngine.assign_activities(activities, grouped)
        assert first == {"act-1": "rp-1", "act-2": None}
        assert PeriodEngine.assign_activities(activities, grouped) == first


# =============================================================================
# TEST: TIME REMAINING
# =============================================================================


class TestTimeRemaining:
    """Test days-until-end lookups."""

    def test_days_until_end(self) -> None:
        """Days are counted from today to the end date."""
        period = _period("rp-1", JAN_1, DEC_31)
        assert PeriodEngine.days_until_period_end(period, date(2026, 12, 1)) == (
            30,
            "rp-1",
        )

    def test_days_until_end_not_current(self) -> None:
        """A period that does not contain today reports the sentinel."""
        period = _period("rp-1", JAN_1, DEC_31)
        assert PeriodEngine.days_until_period_end(period, date(2027, 1, 2)) == (-1, "")

    def test_next_expiration_picks_soonest(self) -> None:
        """The soonest-ending current period wins."""
        periods = [
            _period("rp-long", JAN_1, date(2027, 12, 31)),
            _period("rp-short", JAN_1, date(2026, 6, 30), credential_id="cred-2"),
        ]
        assert PeriodEngine.time_until_next_expiration(periods, date(2026, 6, 1)) == (
            29,
            "rp-short",
        )

    def test_next_expiration_none_current(self) -> None:
        """No current period reports the sentinel."""
        periods = [_period("rp-1", JAN_1, DEC_31)]
        assert PeriodEngine.time_until_next_expiration(periods, date(2030, 1, 1)) == (
            -1,
            "",
        )

    def test_months_before_end(self) -> None:
        """The sign of the month count is ignored."""
        period = _period("rp-1", JAN_1, date(2026, 8, 31))
        assert PeriodEngine.months_before_period_end(period, 6) == date(2026, 2, 28)
        assert PeriodEngine.months_before_period_end(period, -6) == date(2026, 2, 28)
