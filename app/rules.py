import logging
from typing import Optional

from config import DEFAULT_POLICY, ScoringPolicy
from state import GameState

logger = logging.getLogger(__name__)


def set_target(state: GameState, policy: ScoringPolicy = DEFAULT_POLICY) -> int:
    if state.current_set < policy.deciding_set:
        return policy.set_target
    return policy.deciding_set_target


def match_over(state: GameState, policy: ScoringPolicy = DEFAULT_POLICY) -> bool:
    return max(state.team_a_sets, state.team_b_sets) >= policy.sets_to_win


def check_set_win(state: GameState, policy: ScoringPolicy = DEFAULT_POLICY) -> Optional[str]:
    """Close the current set if its score decides it.

    Returns the winning team ("A" or "B"), or None when the set goes on.
    """
    if match_over(state, policy):
        return None

    a, b = state.team_a_score, state.team_b_score
    if max(a, b) < set_target(state, policy) or abs(a - b) < policy.min_lead:
        return None

    winner = "A" if a > b else "B"
    state.put(winner, "sets", state.get(winner, "sets") + 1)
    state.team_a_score = 0
    state.team_b_score = 0

    if policy.reset_allowances_on_set_win:
        state.team_a_timeouts = 0
        state.team_b_timeouts = 0
        state.team_a_subs = 0
        state.team_b_subs = 0

    if not match_over(state, policy):
        state.current_set = state.team_a_sets + state.team_b_sets + 1
        logger.info("Set won by %s (%d-%d sets), now playing set %d",
                    winner, state.team_a_sets, state.team_b_sets, state.current_set)
    else:
        logger.info("Match won by %s (%d-%d sets)", winner, state.team_a_sets, state.team_b_sets)

    return winner
