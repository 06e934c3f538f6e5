"""Award Engine - Pure logic for award (achievement) evaluation.

This engine provides stateless functions for:
- Measuring progress toward an award criterion from the activity list
- Deciding whether an award is earned
- Finding awards that became earned and are not yet recorded

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.

Award Criteria:
- ces: total clock hours from completed activities
- completed: number of completed activities
- loved: completed activities rated "loved"
- how_interesting: completed activities rated "interesting"
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable
from typing import TYPE_CHECKING

from .. import const
from .compliance_engine import ComplianceEngine

if TYPE_CHECKING:
    from ..type_defs import ActivityData, AwardData


# =============================================================================
# TYPE ALIASES
# =============================================================================

# Handler function signature: (completed activities) -> measured value
CriterionHandler = Callable[[list["ActivityData"]], float]


class AwardEngine:
    """Pure logic engine for award evaluation.

    All methods are static or class methods - no instance state.
    """

    # =========================================================================
    # CRITERION HANDLER REGISTRY
    # =========================================================================

    _CRITERION_HANDLERS: dict[str, CriterionHandler] = {}

    @classmethod
    def _register_handlers(cls) -> None:
        """Populate _CRITERION_HANDLERS once."""
        if cls._CRITERION_HANDLERS:
            return

        cls._CRITERION_HANDLERS = {
            const.AWARD_CRITERION_CES: cls._measure_clock_hours,
            const.AWARD_CRITERION_COMPLETED: cls._measure_completed,
            const.AWARD_CRITERION_LOVED: cls._measure_loved,
            const.AWARD_CRITERION_HOW_INTERESTING: cls._measure_interesting,
        }

    # =========================================================================
    # CRITERION HANDLERS
    # =========================================================================

    @staticmethod
    def _measure_clock_hours(completed: list[ActivityData]) -> float:
        return sum(ComplianceEngine.activity_clock_hours(a, None) for a in completed)

    @staticmethod
    def _measure_completed(completed: list[ActivityData]) -> float:
        return float(len(completed))

    @staticmethod
    def _measure_loved(completed: list[ActivityData]) -> float:
        return float(
            sum(
                1
                for a in completed
                if a.get(const.DATA_ACTIVITY_EVAL_RATING) == const.EVAL_RATING_LOVED
            )
        )

    @staticmethod
    def _measure_interesting(completed: list[ActivityData]) -> float:
        return float(
            sum(
                1
                for a in completed
                if a.get(const.DATA_ACTIVITY_EVAL_RATING)
                == const.EVAL_RATING_INTERESTING
            )
        )

    # =========================================================================
    # EVALUATION
    # =========================================================================

    @classmethod
    def measure(cls, criterion: str, activities: Iterable[ActivityData]) -> float:
        """Return the measured value for a criterion (0 for unknown criteria)."""
        cls._register_handlers()
        handler = cls._CRITERION_HANDLERS.get(criterion)
        if handler is None:
            const.LOGGER.debug("DEBUG: Unknown award criterion '%s'", criterion)
            return 0.0
        completed = [a for a in activities if a.get(const.DATA_ACTIVITY_COMPLETED)]
        return handler(completed)

    @classmethod
    def is_earned(cls, award: AwardData, activities: Iterable[ActivityData]) -> bool:
        """Return True when the measured value reaches the award threshold."""
        threshold = award[const.DATA_AWARD_VALUE]
        if threshold <= 0:
            return False
        return cls.measure(award[const.DATA_AWARD_CRITERION], activities) >= threshold

    @classmethod
    def find_new_awards(
        cls,
        awards: Iterable[AwardData],
        activities: Iterable[ActivityData],
        exclude_ids: Collection[str] = (),
    ) -> list[AwardData]:
        """Awards that are earned, not yet dated and not excluded."""
        activity_list = list(activities)
        return [
            award
            for award in awards
            if not award.get(const.DATA_AWARD_DATE_EARNED)
            and award[const.DATA_INTERNAL_ID] not in exclude_ids
            and cls.is_earned(award, activity_list)
        ]
