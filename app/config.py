import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)


def _int_env(env_var: str, default: int, minimum: int = 0) -> int:
    raw_value = os.getenv(env_var)
    if raw_value is None:
        return default

    try:
        value = int(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid integer (got %r); defaulting to %d",
            env_var,
            raw_value,
            default,
        )
        return default

    if value < minimum:
        logger.warning("%s cannot be below %d; defaulting to %d", env_var, minimum, default)
        return default

    return value


def _bool_env(env_var: str, default: bool) -> bool:
    raw_value = os.getenv(env_var)
    if raw_value is None:
        return default
    return raw_value.strip().lower() not in ("0", "false", "no", "off")


def _list_env(env_var: str, default: str) -> list:
    raw_value = os.getenv(env_var) or default
    return [item.strip() for item in raw_value.split(",") if item.strip()]


# === Server ===
HOST = os.getenv("SCOREBOARD_HOST", "0.0.0.0")
PORT = _int_env("SCOREBOARD_PORT", 8080, minimum=1)
LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


def _log_level_env(env_var: str, default: str = "info") -> str:
    value = (os.getenv(env_var) or default).strip().lower()
    if value not in LOG_LEVELS:
        logger.warning("%s %r is not a log level; defaulting to %s", env_var, value, default)
        return default
    return value


LOG_LEVEL = _log_level_env("SCOREBOARD_LOG_LEVEL")

# Matches available before anyone asks for them
SEEDED_MATCHES = _list_env("SCOREBOARD_MATCHES", "Volley,Basket")
DEFAULT_MATCH = "Volley"


# === Scoring rules ===
@dataclass(frozen=True)
class ScoringPolicy:
    """Bounds and rule variants applied by the update protocol.

    max_score is the inclusive upper bound for a live score. A set is won at
    set_target points (deciding_set_target from the deciding_set onwards)
    with a two point lead; the match ends when a team reaches sets_to_win.
    reset_allowances_on_set_win zeroes used timeouts and substitutions
    whenever a set is won.
    """

    max_score: int = 99
    set_target: int = 25
    deciding_set: int = 5
    deciding_set_target: int = 15
    sets_to_win: int = 3
    min_lead: int = 2
    reset_allowances_on_set_win: bool = True


def policy_from_env() -> ScoringPolicy:
    policy = ScoringPolicy(
        max_score=_int_env("SCOREBOARD_MAX_SCORE", 99, minimum=1),
        set_target=_int_env("SCOREBOARD_SET_TARGET", 25, minimum=1),
        deciding_set_target=_int_env("SCOREBOARD_DECIDING_SET_TARGET", 15, minimum=1),
        reset_allowances_on_set_win=_bool_env("SCOREBOARD_RESET_ALLOWANCES", True),
    )
    # a score cap below a set target would make sets unwinnable
    if policy.max_score < max(policy.set_target, policy.deciding_set_target):
        logger.warning(
            "SCOREBOARD_MAX_SCORE %d is below a set target (%d/%d); using default scoring rules",
            policy.max_score,
            policy.set_target,
            policy.deciding_set_target,
        )
        return ScoringPolicy(reset_allowances_on_set_win=policy.reset_allowances_on_set_win)
    return policy


DEFAULT_POLICY = policy_from_env()
