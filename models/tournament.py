"""
Tournaments
-----------
Tournament identifiers, enums, records and the create/update payload.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

from pydantic import BaseModel, field_validator, model_validator

from .base import ChallongeModel, FormPairs, OptionalTimestamp, form_value, query_flag, unwrap_list
from .match import Match
from .participant import Participant

PREFIX = "tournament"


@dataclass(frozen=True)
class TournamentId:
    """
    A tournament is addressed either by its numeric id or by its url,
    optionally under an organization subdomain.
    """
    id: Optional[int] = None
    url: str = ""
    subdomain: str = ""

    def __post_init__(self):
        if (self.id is None) == (not self.url):
            raise ValueError("TournamentId needs exactly one of id or url")

    @classmethod
    def from_id(cls, id: int) -> "TournamentId":
        return cls(id=id)

    @classmethod
    def from_url(cls, url: str, subdomain: str = "") -> "TournamentId":
        return cls(url=url, subdomain=subdomain)

    @classmethod
    def coerce(cls, value: Union["TournamentId", int, str]) -> "TournamentId":
        """Accept a TournamentId, a numeric id, or a url string."""
        if isinstance(value, TournamentId):
            return value
        if isinstance(value, bool):
            raise TypeError("bool is not a tournament id")
        if isinstance(value, int):
            return cls.from_id(value)
        if isinstance(value, str):
            if value.isdigit():
                return cls.from_id(int(value))
            return cls.from_url(value)
        raise TypeError(f"Cannot use {type(value).__name__} as a tournament id")

    def __str__(self) -> str:
        if self.id is not None:
            return str(self.id)
        if not self.subdomain:
            return self.url
        return f"{self.subdomain}-{self.url}"


class TournamentType(str, Enum):
    """Bracket format."""
    SINGLE_ELIMINATION = "single elimination"
    DOUBLE_ELIMINATION = "double elimination"
    ROUND_ROBIN = "round robin"
    SWISS = "swiss"

    def __str__(self) -> str:
        return self.value

    @property
    def query_value(self) -> str:
        """Form used in GET parameters: single_elimination."""
        return self.value.replace(" ", "_")

    @classmethod
    def parse(cls, text: str) -> "TournamentType":
        """Accept either "single elimination" or "single_elimination"."""
        normalized = text.strip().lower().replace("_", " ")
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unknown tournament type: {text!r}")


class TournamentState(str, Enum):
    """Tournament state filter for the index."""
    ALL = "all"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"

    def __str__(self) -> str:
        return self.value


class RankedBy(str, Enum):
    """Round robin / swiss ranking rule."""
    MATCH_WINS = "match wins"
    GAME_WINS = "game wins"
    POINTS_SCORED = "points scored"
    POINTS_DIFFERENCE = "points difference"
    CUSTOM = "custom"

    def __str__(self) -> str:
        return self.value


class TournamentIncludes(Enum):
    """Nested records to return with a tournament."""
    NONE = (False, False)
    PARTICIPANTS = (True, False)
    MATCHES = (False, True)
    ALL = (True, True)

    def to_params(self) -> Dict[str, str]:
        participants, matches = self.value
        return {
            "include_participants": query_flag(participants),
            "include_matches": query_flag(matches),
        }


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class GamePoints(BaseModel):
    """Points awarded per match/game outcome (swiss and round robin)."""
    match_win: float = 1.0
    match_tie: float = 0.5
    game_win: float = 0.0
    game_tie: float = 0.0
    bye: Optional[float] = None

    @classmethod
    def from_fields(cls, data: Dict[str, Any], prefix: str = "") -> "GamePoints":
        """
        Read the flat, string valued {prefix}pts_for_* keys. Unparseable
        values count as 0; an unparseable bye is left unset.
        """
        def points(name: str) -> float:
            value = _to_float(data.get(f"{prefix}pts_for_{name}"))
            return 0.0 if value is None else value

        return cls(
            match_win=points("match_win"),
            match_tie=points("match_tie"),
            game_win=points("game_win"),
            game_tie=points("game_tie"),
            bye=_to_float(data.get(f"{prefix}pts_for_bye")),
        )

    def to_params(self, prefix: str = "") -> FormPairs:
        params: FormPairs = [
            (f"{PREFIX}[{prefix}pts_for_match_win]", form_value(self.match_win)),
            (f"{PREFIX}[{prefix}pts_for_match_tie]", form_value(self.match_tie)),
            (f"{PREFIX}[{prefix}pts_for_game_win]", form_value(self.game_win)),
            (f"{PREFIX}[{prefix}pts_for_game_tie]", form_value(self.game_tie)),
        ]
        if self.bye is not None:
            params.append((f"{PREFIX}[{prefix}pts_for_bye]", form_value(self.bye)))
        return params


class Tournament(ChallongeModel):
    """Challonge tournament record."""

    ENVELOPE: ClassVar[str] = "tournament"

    id: int
    name: str = ""
    url: str = ""
    subdomain: str = ""
    description: str = ""
    description_source: str = ""
    tournament_type: TournamentType = TournamentType.SINGLE_ELIMINATION
    state: str = ""
    ranked_by: str = ""
    game_id: int = 0
    game_name: str = ""
    full_challonge_url: str = ""
    live_image_url: str = ""
    sign_up_url: str = ""
    accept_attachments: bool = False
    allow_participant_match_reporting: bool = False
    anonymous_voting: bool = False
    created_by_api: bool = False
    credit_capped: bool = False
    group_stages_enabled: bool = False
    group_stages_were_started: bool = False
    hide_forum: bool = False
    hide_seeds: bool = False
    hold_third_place_match: bool = False
    notify_users_when_matches_open: bool = False
    notify_users_when_the_tournament_ends: bool = False
    open_signup: bool = False
    private: bool = False
    quick_advance: bool = False
    require_score_agreement: bool = False
    sequential_pairings: bool = False
    show_rounds: bool = False
    teams: bool = False
    review_before_finalizing: bool = False
    accepting_predictions: bool = False
    participants_locked: bool = False
    participants_swappable: bool = False
    team_convertable: bool = False
    max_predictions_per_user: int = 0
    participants_count: int = 0
    prediction_method: int = 0
    progress_meter: int = 0
    swiss_rounds: int = 0
    signup_cap: Optional[int] = None
    check_in_duration: Optional[int] = None
    tie_breaks: List[str] = []
    swiss_points: GamePoints = GamePoints()
    round_robin_points: GamePoints = GamePoints()
    start_at: OptionalTimestamp = None
    started_at: OptionalTimestamp = None
    started_checking_in_at: OptionalTimestamp = None
    completed_at: OptionalTimestamp = None
    created_at: datetime
    updated_at: datetime
    participants: List[Participant] = []
    matches: List[Match] = []

    @model_validator(mode="before")
    @classmethod
    def _collect_points(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            data.setdefault("swiss_points", GamePoints.from_fields(data, ""))
            data.setdefault("round_robin_points", GamePoints.from_fields(data, "rr_"))
        return data

    @field_validator("tournament_type", mode="before")
    @classmethod
    def _parse_type(cls, value: Any) -> TournamentType:
        try:
            return TournamentType.parse(str(value))
        except ValueError:
            return TournamentType.SINGLE_ELIMINATION

    @field_validator("participants", mode="before")
    @classmethod
    def _unwrap_participants(cls, value: Any) -> Any:
        return unwrap_list(value, Participant.ENVELOPE)

    @field_validator("matches", mode="before")
    @classmethod
    def _unwrap_matches(cls, value: Any) -> Any:
        return unwrap_list(value, Match.ENVELOPE)

    @property
    def tournament_id(self) -> TournamentId:
        return TournamentId.from_id(self.id)


@dataclass
class TournamentCreate:
    """
    Attributes for creating or updating a tournament.

    All attributes are sent; optional ones only when set. grand_finals_modifier
    applies to double elimination: None gives the winners bracket finalist two
    chances, "single match" plays one grand final, "skip" plays none.
    start_at is used with check_in_duration (minutes) to open check-in.
    """
    name: str = ""
    tournament_type: TournamentType = TournamentType.SINGLE_ELIMINATION
    url: str = ""
    subdomain: str = ""
    description: str = ""
    open_signup: bool = False
    hold_third_place_match: bool = False
    swiss_points: GamePoints = field(default_factory=lambda: GamePoints(bye=1.0))
    swiss_rounds: int = 0
    ranked_by: RankedBy = RankedBy.POINTS_SCORED
    round_robin_points: GamePoints = field(default_factory=GamePoints)
    show_rounds: bool = False
    private: bool = False
    game_name: Optional[str] = None
    notify_users_when_matches_open: bool = True
    notify_users_when_the_tournament_ends: bool = True
    sequential_pairings: bool = False
    signup_cap: int = 4
    start_at: Optional[datetime] = None
    check_in_duration: int = 60
    grand_finals_modifier: Optional[str] = None

    def to_params(self) -> FormPairs:
        def pair(key: str, value: Any):
            return (f"{PREFIX}[{key}]", form_value(value))

        params: FormPairs = [
            pair("name", self.name),
            pair("tournament_type", self.tournament_type),
            pair("url", self.url),
            pair("subdomain", self.subdomain),
            pair("description", self.description),
            pair("open_signup", self.open_signup),
            pair("hold_third_place_match", self.hold_third_place_match),
        ]
        params.extend(self.swiss_points.to_params(""))
        params.append(pair("swiss_rounds", self.swiss_rounds))
        params.append(pair("ranked_by", self.ranked_by))
        params.extend(self.round_robin_points.to_params("rr_"))
        params.extend([
            pair("show_rounds", self.show_rounds),
            pair("private", self.private),
            pair("notify_users_when_matches_open", self.notify_users_when_matches_open),
            pair("notify_users_when_the_tournament_ends", self.notify_users_when_the_tournament_ends),
            pair("sequential_pairings", self.sequential_pairings),
            pair("signup_cap", self.signup_cap),
            pair("check_in_duration", self.check_in_duration),
        ])
        if self.grand_finals_modifier is not None:
            params.append(pair("grand_finals_modifier", self.grand_finals_modifier))
        if self.start_at is not None:
            params.append(pair("start_at", self.start_at))
        if self.game_name is not None:
            params.append(pair("game_name", self.game_name))
        return params
