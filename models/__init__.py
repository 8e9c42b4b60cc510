# Models module - Challonge entities and request payloads
# Responses decode through pydantic, requests encode to form pairs

from .attachment import Asset, Attachment, AttachmentCreate
from .match import Match, MatchScore, MatchScores, MatchState, MatchUpdate
from .participant import Participant, ParticipantCreate
from .tournament import (
    GamePoints, RankedBy, Tournament, TournamentCreate, TournamentId,
    TournamentIncludes, TournamentState, TournamentType,
)

__all__ = [
    "Asset", "Attachment", "AttachmentCreate",
    "Match", "MatchScore", "MatchScores", "MatchState", "MatchUpdate",
    "Participant", "ParticipantCreate",
    "GamePoints", "RankedBy", "Tournament", "TournamentCreate", "TournamentId",
    "TournamentIncludes", "TournamentState", "TournamentType",
]
