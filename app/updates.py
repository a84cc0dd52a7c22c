import logging
import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from config import DEFAULT_POLICY, ScoringPolicy
from rules import check_set_win
from state import TEAMS, GameState, clamp

logger = logging.getLogger(__name__)

# Config fields copied verbatim when sent as strings
TEXT_FIELDS = ("teamA_name", "teamB_name", "bgColor", "sideLeft")
# Optional references that an explicit null (or "null") clears
CLEARABLE_FIELDS = ("logoA", "logoB", "bgImage")


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class UpdateRequest(BaseModel):
    """Typed view of an update payload.

    Nothing in here raises on bad input: a missing or malformed value turns
    into its default (team "A", delta 0, keepNames true) and a config field
    that isn't a string is treated as absent.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    action: str = ""
    team: str = "A"
    delta: int = 0
    keep_names: bool = Field(True, alias="keepNames")

    team_a_name: Optional[str] = Field(None, alias="teamA_name")
    team_b_name: Optional[str] = Field(None, alias="teamB_name")
    bg_color: Optional[str] = Field(None, alias="bgColor")
    side_left: Optional[str] = Field(None, alias="sideLeft")
    logo_a: Optional[str] = Field(None, alias="logoA")
    logo_b: Optional[str] = Field(None, alias="logoB")
    bg_image: Optional[str] = Field(None, alias="bgImage")
    max_timeouts: Optional[int] = None
    max_subs: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _drop_unusable_config(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        cleaned = dict(data)
        for key in TEXT_FIELDS:
            if key in cleaned and not isinstance(cleaned[key], str):
                logger.debug("Ignoring non-text %s=%r", key, cleaned[key])
                del cleaned[key]
        for key in CLEARABLE_FIELDS:
            if key not in cleaned:
                continue
            value = cleaned[key]
            if value == "null":
                cleaned[key] = None
            elif value is not None and not isinstance(value, str):
                logger.debug("Ignoring non-text %s=%r", key, value)
                del cleaned[key]
        return cleaned

    @field_validator("action", mode="before")
    @classmethod
    def _action(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("team", mode="before")
    @classmethod
    def _team(cls, value: Any) -> str:
        if isinstance(value, str) and value.strip().upper() in TEAMS:
            return value.strip().upper()
        return "A"

    @field_validator("delta", mode="before")
    @classmethod
    def _delta(cls, value: Any) -> int:
        parsed = _to_int(value)
        if parsed is None:
            logger.debug("Unparsable delta %r; using 0", value)
            return 0
        return parsed

    @field_validator("keep_names", mode="before")
    @classmethod
    def _keep_names(cls, value: Any) -> bool:
        if value is False:
            return False
        return not (isinstance(value, str) and value.strip().lower() == "false")

    @field_validator("max_timeouts", "max_subs", mode="before")
    @classmethod
    def _allowance(cls, value: Any) -> Optional[int]:
        parsed = _to_int(value)
        return parsed if parsed is not None and parsed > 0 else None

    @classmethod
    def from_payload(cls, payload: Any) -> "UpdateRequest":
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Unusable update payload, treating as no-op: %s", exc)
            return cls()

    def given(self, field: str) -> bool:
        return field in self.model_fields_set


def _apply_config(state: GameState, req: UpdateRequest):
    if req.team_a_name is not None:
        state.team_a_name = req.team_a_name
    if req.team_b_name is not None:
        state.team_b_name = req.team_b_name
    if req.bg_color is not None:
        state.bg_color = req.bg_color
    if req.side_left in TEAMS:
        state.side_left = req.side_left

    # absent leaves the reference alone, explicit null clears it
    if req.given("logo_a"):
        state.logo_a = req.logo_a
    if req.given("logo_b"):
        state.logo_b = req.logo_b
    if req.given("bg_image"):
        state.bg_image = req.bg_image

    if req.max_timeouts is not None:
        state.max_timeouts = req.max_timeouts
    if req.max_subs is not None:
        state.max_subs = req.max_subs
    for team in TEAMS:
        state.put(team, "timeouts", clamp(state.get(team, "timeouts"), 0, state.max_timeouts))
        state.put(team, "subs", clamp(state.get(team, "subs"), 0, state.max_subs))


def reset_set(state: GameState):
    for team in TEAMS:
        state.put(team, "score", 0)
        state.put(team, "timeouts", 0)
        state.put(team, "subs", 0)


def new_match(previous: GameState, keep_names: bool = True) -> GameState:
    logger.info("Match reset (keep_names=%s)", keep_names)
    fresh = GameState()
    if keep_names:
        fresh.team_a_name = previous.team_a_name
        fresh.team_b_name = previous.team_b_name
    return fresh


def apply_update(state: GameState, req: UpdateRequest,
                 policy: ScoringPolicy = DEFAULT_POLICY) -> Optional[GameState]:
    """Apply one control action to ``state``.

    Mutates ``state`` in place and returns None, except for reset_match which
    leaves ``state`` untouched and returns the state that must replace it.
    """
    action = req.action
    team = req.team

    if action == "set_config":
        _apply_config(state, req)

    elif action == "score":
        state.put(team, "score", clamp(state.get(team, "score") + req.delta, 0, policy.max_score))
        check_set_win(state, policy)

    elif action == "timeout":
        state.put(team, "timeouts", clamp(state.get(team, "timeouts") + req.delta, 0, state.max_timeouts))

    elif action == "sub":
        state.put(team, "subs", clamp(state.get(team, "subs") + req.delta, 0, state.max_subs))

    elif action == "reset_set":
        reset_set(state)

    elif action == "reset_match":
        return new_match(state, keep_names=req.keep_names)

    else:
        logger.debug("Ignoring unknown action %r", action)
        return None

    logger.debug("Applied %s team=%s delta=%d", action, team, req.delta)
    return None
