# Match state shared between the control page (writes) and the display page (polls)
from dataclasses import dataclass, replace
from typing import Optional

TEAMS = ("A", "B")


@dataclass
class GameState:
    team_a_name: str = "Squadra A"
    team_b_name: str = "Squadra B"
    team_a_score: int = 0
    team_b_score: int = 0
    team_a_sets: int = 0
    team_b_sets: int = 0
    current_set: int = 1
    team_a_timeouts: int = 0
    team_b_timeouts: int = 0
    team_a_subs: int = 0
    team_b_subs: int = 0
    max_timeouts: int = 2
    max_subs: int = 6
    logo_a: Optional[str] = None
    logo_b: Optional[str] = None
    bg_color: str = "#000000"
    bg_image: Optional[str] = None
    side_left: str = "A"  # team shown on the left of the display

    def get(self, team: str, field: str) -> int:
        return getattr(self, f"team_{team.lower()}_{field}")

    def put(self, team: str, field: str, value: int):
        setattr(self, f"team_{team.lower()}_{field}", value)

    def copy(self) -> "GameState":
        return replace(self)

    def to_dict(self) -> dict:
        """Flat wire representation; unset optionals stay as explicit None."""
        return {
            "teamA_name": self.team_a_name,
            "teamB_name": self.team_b_name,
            "teamA_score": self.team_a_score,
            "teamB_score": self.team_b_score,
            "teamA_sets": self.team_a_sets,
            "teamB_sets": self.team_b_sets,
            "current_set": self.current_set,
            "teamA_timeouts": self.team_a_timeouts,
            "teamB_timeouts": self.team_b_timeouts,
            "teamA_subs": self.team_a_subs,
            "teamB_subs": self.team_b_subs,
            "max_timeouts": self.max_timeouts,
            "max_subs": self.max_subs,
            "logoA": self.logo_a,
            "logoB": self.logo_b,
            "bgColor": self.bg_color,
            "bgImage": self.bg_image,
            "sideLeft": self.side_left,
        }


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
