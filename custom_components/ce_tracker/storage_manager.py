# File: storage_manager.py
"""Handles persistent data storage for the CE Tracker integration.

Uses Home Assistant's Storage helper to save and load credential data, ensuring
the state is preserved across restarts. This includes credentials, renewal
periods, CE activities, special categories, reinstatements, disciplinary
actions, awards and the set of awards already notified.

Also exposes the repository read interface used by the managers:
fetch_activities(filter), fetch_renewal_periods(credential_id) and
fetch_special_categories(credential_id).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store

from . import const
from .data_builders import build_award, normalize_data
from .type_defs import (
    ActivityData,
    DataSnapshot,
    RenewalPeriodData,
    SpecialCategoryData,
)
from .utils.dt_utils import dt_now_utc, dt_parse_date


@dataclass(frozen=True)
class ActivityFilter:
    """Predicate object for activity reads.

    Every attribute left as None matches everything.
    """

    completed: bool | None = None
    credential_id: str | None = None
    renewal_period_id: str | None = None
    special_category_id: str | None = None
    for_reinstatement: bool | None = None
    completed_on_or_after: date | None = None
    completed_on_or_before: date | None = None

    def matches(self, activity: ActivityData) -> bool:
        """Return True if the activity satisfies every set predicate."""
        if (
            self.completed is not None
            and bool(activity.get(const.DATA_ACTIVITY_COMPLETED)) != self.completed
        ):
            return False
        if (
            self.credential_id is not None
            and self.credential_id
            not in activity.get(const.DATA_ACTIVITY_CREDENTIAL_IDS, [])
        ):
            return False
        if (
            self.renewal_period_id is not None
            and activity.get(const.DATA_ACTIVITY_RENEWAL_PERIOD_ID)
            != self.renewal_period_id
        ):
            return False
        if (
            self.special_category_id is not None
            and activity.get(const.DATA_ACTIVITY_SPECIAL_CATEGORY_ID)
            != self.special_category_id
        ):
            return False
        if (
            self.for_reinstatement is not None
            and bool(activity.get(const.DATA_ACTIVITY_FOR_REINSTATEMENT))
            != self.for_reinstatement
        ):
            return False
        if self.completed_on_or_after or self.completed_on_or_before:
            completed_on = dt_parse_date(
                activity.get(const.DATA_ACTIVITY_COMPLETION_DATE)
            )
            if completed_on is None:
                return False
            if self.completed_on_or_after and completed_on < self.completed_on_or_after:
                return False
            if (
                self.completed_on_or_before
                and completed_on > self.completed_on_or_before
            ):
                return False
        return True


def filter_activities(
    activities: Iterable[ActivityData], activity_filter: ActivityFilter | None = None
) -> list[ActivityData]:
    """Apply an ActivityFilter to a collection of activities."""
    if activity_filter is None:
        return list(activities)
    return [a for a in activities if activity_filter.matches(a)]


class CETrackerStorageManager:
    """Manages loading, saving, and accessing data from Home Assistant's storage.

    Utilizes internal_id as the primary key for all entities.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the storage manager.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).

        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}  # In-memory data cache for quick access.

    def _get_default_structure(self) -> dict[str, Any]:
        """Get the default empty data structure with the built-in awards."""
        awards = [build_award(dict(award)) for award in const.DEFAULT_AWARDS]
        return {
            const.DATA_META: {
                const.DATA_META_CREATED: dt_now_utc().isoformat(),
            },
            const.DATA_CREDENTIALS: {},
            const.DATA_RENEWAL_PERIODS: {},
            const.DATA_ACTIVITIES: {},
            const.DATA_SPECIAL_CATEGORIES: {},
            const.DATA_REINSTATEMENTS: {},
            const.DATA_DISCIPLINARY_ACTIONS: {},
            const.DATA_AWARDS: {a[const.DATA_INTERNAL_ID]: a for a in awards},
            const.DATA_NOTIFIED_AWARDS: [],
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with the default structure. Loaded
        records are normalized so every field has a value.
        """
        const.LOGGER.debug("DEBUG: CETrackerStorageManager: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = self._get_default_structure()
        else:
            self._data = normalize_data(dict(existing_data))
            const.LOGGER.debug(
                "DEBUG: Loaded existing data from storage: %s",
                {bucket: len(self._data[bucket]) for bucket in const.DATA_BUCKETS},
            )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the entire in-memory data structure."""
        self._data = new_data

    # -------------------------------------------------------------------------------------
    # Bucket getters
    # -------------------------------------------------------------------------------------

    def get_credentials(self) -> dict[str, Any]:
        """Retrieve the credentials data."""
        return self._data.get(const.DATA_CREDENTIALS, {})

    def get_renewal_periods(self) -> dict[str, Any]:
        """Retrieve the renewal periods data."""
        return self._data.get(const.DATA_RENEWAL_PERIODS, {})

    def get_activities(self) -> dict[str, Any]:
        """Retrieve the CE activities data."""
        return self._data.get(const.DATA_ACTIVITIES, {})

    def get_special_categories(self) -> dict[str, Any]:
        """Retrieve the special categories data."""
        return self._data.get(const.DATA_SPECIAL_CATEGORIES, {})

    def get_reinstatements(self) -> dict[str, Any]:
        """Retrieve the reinstatements data."""
        return self._data.get(const.DATA_REINSTATEMENTS, {})

    def get_disciplinary_actions(self) -> dict[str, Any]:
        """Retrieve the disciplinary actions data."""
        return self._data.get(const.DATA_DISCIPLINARY_ACTIONS, {})

    def get_awards(self) -> dict[str, Any]:
        """Retrieve the award definitions."""
        return self._data.get(const.DATA_AWARDS, {})

    def get_notified_awards(self) -> set[str]:
        """Retrieve the ids of awards whose notification was already planned."""
        return set(self._data.get(const.DATA_NOTIFIED_AWARDS, []))

    def set_notified_awards(self, award_ids: Iterable[str]) -> None:
        """Replace the notified award ids (sorted for stable storage)."""
        self._data[const.DATA_NOTIFIED_AWARDS] = sorted(award_ids)

    def snapshot(self) -> DataSnapshot:
        """Return shallow copies of every bucket for one computation pass."""
        return DataSnapshot(
            credentials=dict(self.get_credentials()),
            renewal_periods=dict(self.get_renewal_periods()),
            activities=dict(self.get_activities()),
            special_categories=dict(self.get_special_categories()),
            reinstatements=dict(self.get_reinstatements()),
            disciplinary_actions=dict(self.get_disciplinary_actions()),
        )

    # -------------------------------------------------------------------------------------
    # Repository reads
    # -------------------------------------------------------------------------------------

    def fetch_activities(
        self, activity_filter: ActivityFilter | None = None
    ) -> list[ActivityData]:
        """Return activities matching the filter (all when None)."""
        return filter_activities(self.get_activities().values(), activity_filter)

    def fetch_renewal_periods(self, credential_id: str) -> list[RenewalPeriodData]:
        """Return the renewal periods owned by a credential, oldest first."""
        return sorted(
            (
                p
                for p in self.get_renewal_periods().values()
                if p.get(const.DATA_RENEWAL_CREDENTIAL_ID) == credential_id
            ),
            key=lambda p: p[const.DATA_RENEWAL_START],
        )

    def fetch_special_categories(self, credential_id: str) -> list[SpecialCategoryData]:
        """Return the special categories owned by a credential."""
        return [
            c
            for c in self.get_special_categories().values()
            if c.get(const.DATA_CATEGORY_CREDENTIAL_ID) == credential_id
        ]

    # -------------------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------------------

    async def async_save(self) -> None:
        """Save the current data structure to storage asynchronously.

        Raises:
            No exceptions raised - errors are logged but do not stop execution.
            OSError: Logged when file system issues prevent saving.
            TypeError: Logged when data contains non-serializable types.
            ValueError: Logged when data is invalid for JSON serialization.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s",
                err,
            )

    async def async_delete_storage(self) -> None:
        """Clear in-memory data and remove the storage file."""
        self._data = self._get_default_structure()
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s",
                self._store.path,
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
