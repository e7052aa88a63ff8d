from .decision import FALLBACK_MARKER, decide_outcome, deterministic_decision
from .main import OracleAgent
from .models import Decision, NotSettled, Settled, SettleOutcome

__all__ = [
    "FALLBACK_MARKER",
    "decide_outcome",
    "deterministic_decision",
    "OracleAgent",
    "Decision",
    "NotSettled",
    "Settled",
    "SettleOutcome",
]
