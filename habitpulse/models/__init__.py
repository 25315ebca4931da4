from .habit import Habit, Cadence, ProgressRuleName
from .sub_task import SubTask, SubTaskLog
from .habit_entry import HabitEntry
from .progress import HabitProgress, WeeklyProgress, MonthlyOverview
from .system import AdaptiveSystem, SystemAdaptation, ExecutionQuality, SystemType
from .momentum import MomentumVector
from .profile import CognitiveProfile, RecoveryProtocol
from .reflection import MonthlyReflection

__all__ = [
    "Habit",
    "Cadence",
    "ProgressRuleName",
    "SubTask",
    "SubTaskLog",
    "HabitEntry",
    "HabitProgress",
    "WeeklyProgress",
    "MonthlyOverview",
    "AdaptiveSystem",
    "SystemAdaptation",
    "ExecutionQuality",
    "SystemType",
    "MomentumVector",
    "CognitiveProfile",
    "RecoveryProtocol",
    "MonthlyReflection",
]
