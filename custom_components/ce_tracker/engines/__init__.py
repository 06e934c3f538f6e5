"""Engine modules for CE Tracker integration.

Contains specialized computation engines:
- period_engine: Renewal period resolution and activity assignment
- compliance_engine: Remaining overall and special category CE
- reinstatement_engine: Reinstatement hours and category requirements
- reminder_engine: Reminder planning with stable keys
- award_engine: Award criterion evaluation
"""

# Use relative imports within package to avoid mypy module resolution issues
from .award_engine import AwardEngine
from .compliance_engine import ComplianceEngine
from .period_engine import PeriodEngine
from .reinstatement_engine import ReinstatementEngine
from .reminder_engine import ReminderEngine, ReminderSettings

__all__ = [
    "AwardEngine",
    "ComplianceEngine",
    "PeriodEngine",
    "ReinstatementEngine",
    "ReminderEngine",
    "ReminderSettings",
]
