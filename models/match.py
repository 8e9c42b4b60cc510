"""
Matches
-------
Match records, score strings and score updates.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Iterator, List, Optional, Union

from pydantic import field_validator

from .attachment import Attachment
from .base import ChallongeModel, FormPairs, OptionalTimestamp, form_value, unwrap_list

PREFIX = "match"


class MatchState(str, Enum):
    """Match state, also used to filter the match index."""
    ALL = "all"
    PENDING = "pending"
    OPEN = "open"
    COMPLETE = "complete"

    def __str__(self) -> str:
        return self.value


def _parse_score(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


@dataclass(frozen=True)
class MatchScore:
    """Set/game score, player 1 first."""
    player1: int = 0
    player2: int = 0

    @classmethod
    def parse(cls, text: str) -> "MatchScore":
        """
        Parse "a-b". Each side is trimmed; a side that is missing or not a
        number counts as 0, so "3--5" is 3-0 and " - 118" is 0-118.
        """
        parts = text.strip().split("-")
        player1 = _parse_score(parts[0]) if parts else 0
        player2 = _parse_score(parts[1]) if len(parts) > 1 else 0
        return cls(player1, player2)

    def __str__(self) -> str:
        return f"{self.player1}-{self.player2}"


@dataclass
class MatchScores:
    """Comma separated list of set/game scores."""
    scores: List[MatchScore] = field(default_factory=list)

    @classmethod
    def parse(cls, csv: str) -> "MatchScores":
        return cls([MatchScore.parse(part) for part in csv.split(",") if part.strip()])

    def __str__(self) -> str:
        return ",".join(str(score) for score in self.scores)

    def __iter__(self) -> Iterator[MatchScore]:
        return iter(self.scores)

    def __len__(self) -> int:
        return len(self.scores)


class Match(ChallongeModel):
    """Challonge match record."""

    ENVELOPE: ClassVar[str] = "match"

    id: int
    tournament_id: int
    identifier: str = ""
    round: int = 0
    state: MatchState = MatchState.ALL
    player1_id: Optional[int] = None
    player1_is_prereq_match_loser: bool = False
    player1_prereq_match_id: Optional[int] = None
    player1_votes: int = 0
    player2_id: Optional[int] = None
    player2_is_prereq_match_loser: bool = False
    player2_prereq_match_id: Optional[int] = None
    player2_votes: int = 0
    winner_id: Optional[int] = None
    loser_id: Optional[int] = None
    group_id: Optional[int] = None
    location: str = ""
    has_attachment: bool = False
    attachment_count: Optional[int] = None
    prerequisite_match_ids_csv: str = ""
    scores_csv: str = ""
    scheduled_time: OptionalTimestamp = None
    started_at: OptionalTimestamp = None
    underway_at: OptionalTimestamp = None
    created_at: datetime
    updated_at: datetime
    attachments: List[Attachment] = []

    @field_validator("state", mode="before")
    @classmethod
    def _parse_state(cls, value: Any) -> MatchState:
        try:
            return MatchState(str(value))
        except ValueError:
            return MatchState.ALL

    @field_validator("attachments", mode="before")
    @classmethod
    def _unwrap_attachments(cls, value: Any) -> Any:
        return unwrap_list(value, Attachment.ENVELOPE)

    @property
    def scores(self) -> MatchScores:
        return MatchScores.parse(self.scores_csv)


@dataclass
class MatchUpdate:
    """
    Score update for a match.

    winner_id is a participant id, or "tie" for round robin and swiss.
    Setting winner_id requires scores_csv; scores_csv alone may be sent for
    live score updates. Changing the outcome of a completed match resets
    every match that branches from it.
    """
    scores_csv: Union[str, MatchScores] = ""
    winner_id: Optional[Union[int, str]] = None
    player1_votes: Optional[int] = None
    player2_votes: Optional[int] = None

    def __post_init__(self):
        if self.winner_id is not None:
            if not str(self.scores_csv).strip():
                raise ValueError("scores_csv is required when winner_id is set")
            if isinstance(self.winner_id, str) and self.winner_id != "tie":
                raise ValueError(f"winner_id must be a participant id or 'tie', got {self.winner_id!r}")

    def to_params(self) -> FormPairs:
        params: FormPairs = []
        if self.player1_votes is not None:
            params.append((f"{PREFIX}[player1_votes]", form_value(self.player1_votes)))
        if self.player2_votes is not None:
            params.append((f"{PREFIX}[player2_votes]", form_value(self.player2_votes)))
        params.append((f"{PREFIX}[scores_csv]", str(self.scores_csv)))
        if self.winner_id is not None:
            params.append((f"{PREFIX}[winner_id]", form_value(self.winner_id)))
        return params
