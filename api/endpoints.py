"""
Endpoints
---------
Relative paths of the Challonge v1 REST API. Every path ends in .json;
the base url is applied by the transport.
"""

from models.tournament import TournamentId


def tournaments() -> str:
    return "tournaments.json"


def tournament(tournament_id: TournamentId) -> str:
    return f"tournaments/{tournament_id}.json"


def tournament_action(tournament_id: TournamentId, action: str) -> str:
    """start, finalize, reset, process_check_ins, abort_check_in"""
    return f"tournaments/{tournament_id}/{action}.json"


def participants(tournament_id: TournamentId) -> str:
    return f"tournaments/{tournament_id}/participants.json"


def participants_bulk(tournament_id: TournamentId) -> str:
    return f"tournaments/{tournament_id}/participants/bulk_add.json"


def participants_randomize(tournament_id: TournamentId) -> str:
    return f"tournaments/{tournament_id}/participants/randomize.json"


def participant(tournament_id: TournamentId, participant_id: int) -> str:
    return f"tournaments/{tournament_id}/participants/{participant_id}.json"


def participant_action(tournament_id: TournamentId, participant_id: int, action: str) -> str:
    """check_in, undo_check_in"""
    return f"tournaments/{tournament_id}/participants/{participant_id}/{action}.json"


def matches(tournament_id: TournamentId) -> str:
    return f"tournaments/{tournament_id}/matches.json"


def match(tournament_id: TournamentId, match_id: int) -> str:
    return f"tournaments/{tournament_id}/matches/{match_id}.json"


def attachments(tournament_id: TournamentId, match_id: int) -> str:
    return f"tournaments/{tournament_id}/matches/{match_id}/attachments.json"


def attachment(tournament_id: TournamentId, match_id: int, attachment_id: int) -> str:
    return f"tournaments/{tournament_id}/matches/{match_id}/attachments/{attachment_id}.json"
