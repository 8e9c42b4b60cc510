"""
Challonge Client
----------------
One method per Challonge REST API endpoint.

Usage:
    challonge = Challonge("myusername", "myapikey")
    tournament = await challonge.get_tournament(TournamentId.from_id(2669881))

API documentation: https://api.challonge.com/v1
"""

from datetime import date
from typing import Dict, List, Optional, Union

import httpx

from core.errors import ConfigurationError
from infra.config import ClientSettings, Credentials, load_settings
from infra.logging import get_logger
from models.attachment import Attachment, AttachmentCreate
from models.base import query_flag
from models.match import Match, MatchState, MatchUpdate
from models.participant import Participant, ParticipantCreate, bulk_params
from models.tournament import (
    Tournament, TournamentCreate, TournamentId, TournamentIncludes,
    TournamentState, TournamentType,
)

from . import endpoints
from .client import APIClient, APIConfig

TournamentRef = Union[TournamentId, int, str]


class Challonge:
    """
    Client for the Challonge REST API.

    Every method is a coroutine and raises a ChallongeError subclass on
    failure (see core.errors).
    """

    def __init__(
        self,
        username: str,
        api_key: str,
        settings: Optional[ClientSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_delay_factor: float = 1.0,
    ):
        if not username or not api_key:
            raise ConfigurationError("Challonge username and API key are required")

        settings = settings or ClientSettings()
        self.settings = settings
        self._logger = get_logger("client")
        self._api = APIClient(
            APIConfig(
                name="challonge",
                base_url=settings.base_url,
                username=username,
                api_key=api_key,
                timeout_seconds=settings.timeout_seconds,
                max_retries=settings.max_retries,
                retry_delay_factor=retry_delay_factor,
                rate_limit_requests=settings.rate_limit_requests,
                rate_limit_burst=settings.rate_limit_burst,
                user_agent=settings.user_agent,
            ),
            transport=transport,
        )

    @classmethod
    def from_config(cls, config_path: Optional[str] = None, **kwargs) -> "Challonge":
        """Build a client from challonge.yaml and CHALLONGE_* environment variables."""
        credentials = Credentials.from_env()
        return cls(credentials.username, credentials.api_key, settings=load_settings(config_path), **kwargs)

    @property
    def api(self) -> APIClient:
        return self._api

    # =========================================================================
    # Tournaments
    # =========================================================================

    async def tournament_index(
        self,
        state: Optional[TournamentState] = None,
        tournament_type: Optional[TournamentType] = None,
        created_after: Optional[date] = None,
        created_before: Optional[date] = None,
        subdomain: Optional[str] = None,
    ) -> List[Tournament]:
        """Retrieve a set of tournaments created with your account."""
        params: Dict[str, str] = {}
        if state is not None:
            params["state"] = str(state)
        if tournament_type is not None:
            params["type"] = tournament_type.query_value
        if created_after is not None:
            params["created_after"] = created_after.strftime("%Y-%m-%d")
        if created_before is not None:
            params["created_before"] = created_before.strftime("%Y-%m-%d")
        if subdomain:
            params["subdomain"] = subdomain

        data = await self._api.get(endpoints.tournaments(), params=params)
        tournaments = Tournament.decode_index(data)
        self._logger.info(f"Fetched {len(tournaments)} tournaments", extra={"operation": "tournament_index"})
        return tournaments

    async def get_tournament(
        self,
        tournament_id: TournamentRef,
        includes: TournamentIncludes = TournamentIncludes.NONE,
    ) -> Tournament:
        """Retrieve a single tournament record created with your account."""
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.get(endpoints.tournament(tid), params=includes.to_params())
        return Tournament.decode(data)

    async def create_tournament(self, tournament: TournamentCreate) -> Tournament:
        """Create a new tournament."""
        data = await self._api.post(endpoints.tournaments(), data=tournament.to_params())
        created = Tournament.decode(data)
        self._logger.info(
            f"Created tournament {created.id} ({created.url})",
            extra={"operation": "create_tournament"},
        )
        return created

    async def update_tournament(self, tournament_id: TournamentRef, tournament: TournamentCreate) -> Tournament:
        """Update a tournament's attributes."""
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.put(endpoints.tournament(tid), data=tournament.to_params())
        return Tournament.decode(data)

    async def delete_tournament(self, tournament_id: TournamentRef) -> None:
        """
        Delete a tournament along with all its associated records.
        There is no undo, so use with care!
        """
        tid = TournamentId.coerce(tournament_id)
        await self._api.delete(endpoints.tournament(tid))
        self._logger.info(f"Deleted tournament {tid}", extra={"operation": "delete_tournament"})

    async def tournament_process_checkins(
        self,
        tournament_id: TournamentRef,
        includes: TournamentIncludes = TournamentIncludes.NONE,
    ) -> Tournament:
        """
        Close check-in before the tournament is started.

        1. Marks participants who have not checked in as inactive.
        2. Moves inactive participants to bottom seeds (ordered by original seed).
        3. Transitions the tournament state from 'checking_in' to 'checked_in'.

        Checked in participants on the waiting list are promoted if slots
        become available.
        """
        return await self._tournament_action("process_check_ins", tournament_id, includes)

    async def tournament_abort_checkins(
        self,
        tournament_id: TournamentRef,
        includes: TournamentIncludes = TournamentIncludes.NONE,
    ) -> Tournament:
        """
        Abort check-in so start_at and check_in_duration can be edited again.

        1. Makes all participants active and clears their checked_in_at times.
        2. Transitions the tournament state from 'checking_in' or 'checked_in' to 'pending'.
        """
        return await self._tournament_action("abort_check_in", tournament_id, includes)

    async def tournament_start(
        self,
        tournament_id: TournamentRef,
        includes: TournamentIncludes = TournamentIncludes.NONE,
    ) -> Tournament:
        """Start a tournament, opening up first round matches for score reporting.
        The tournament must have at least 2 participants."""
        return await self._tournament_action("start", tournament_id, includes)

    async def tournament_finalize(
        self,
        tournament_id: TournamentRef,
        includes: TournamentIncludes = TournamentIncludes.NONE,
    ) -> Tournament:
        """Finalize a tournament that has had all match scores submitted, rendering its results permanent."""
        return await self._tournament_action("finalize", tournament_id, includes)

    async def tournament_reset(
        self,
        tournament_id: TournamentRef,
        includes: TournamentIncludes = TournamentIncludes.NONE,
    ) -> Tournament:
        """Reset a tournament, clearing all of its scores and attachments.
        Participants can then be edited before starting again."""
        return await self._tournament_action("reset", tournament_id, includes)

    async def _tournament_action(
        self,
        action: str,
        tournament_id: TournamentRef,
        includes: TournamentIncludes,
    ) -> Tournament:
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.post(endpoints.tournament_action(tid, action), params=includes.to_params())
        tournament = Tournament.decode(data)
        self._logger.info(
            f"Tournament {tid}: {action} -> state={tournament.state or '?'}",
            extra={"operation": f"tournament_{action}"},
        )
        return tournament

    # =========================================================================
    # Participants
    # =========================================================================

    async def participant_index(self, tournament_id: TournamentRef) -> List[Participant]:
        """Retrieve a tournament's participant list."""
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.get(endpoints.participants(tid))
        return Participant.decode_index(data)

    async def create_participant(self, tournament_id: TournamentRef, participant: ParticipantCreate) -> Participant:
        """Add a participant to a tournament (up until it is started)."""
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.post(endpoints.participants(tid), data=participant.to_params())
        return Participant.decode(data)

    async def create_participant_bulk(
        self,
        tournament_id: TournamentRef,
        participants: List[ParticipantCreate],
    ) -> List[Participant]:
        """
        Bulk add participants to a tournament (up until it is started).

        If an invalid participant is detected the whole request is rolled back.
        """
        if not participants:
            return []
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.post(endpoints.participants_bulk(tid), data=bulk_params(participants))
        added = Participant.decode_index(data) if data is not None else []
        self._logger.info(
            f"Bulk added {len(participants)} participants to {tid}",
            extra={"operation": "create_participant_bulk"},
        )
        return added

    async def get_participant(
        self,
        tournament_id: TournamentRef,
        participant_id: int,
        include_matches: bool = False,
    ) -> Participant:
        """Retrieve a single participant record for a tournament."""
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.get(
            endpoints.participant(tid, participant_id),
            params={"include_matches": query_flag(include_matches)},
        )
        return Participant.decode(data)

    async def update_participant(
        self,
        tournament_id: TournamentRef,
        participant_id: int,
        participant: ParticipantCreate,
    ) -> Participant:
        """Update the attributes of a tournament participant."""
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.put(endpoints.participant(tid, participant_id), data=participant.to_params())
        return Participant.decode(data)

    async def check_in_participant(self, tournament_id: TournamentRef, participant_id: int) -> Participant:
        """Check a participant in, setting checked_in_at to the current time."""
        return await self._participant_action("check_in", tournament_id, participant_id)

    async def undo_check_in_participant(self, tournament_id: TournamentRef, participant_id: int) -> Participant:
        """Mark a participant as having not checked in, clearing checked_in_at."""
        return await self._participant_action("undo_check_in", tournament_id, participant_id)

    async def delete_participant(self, tournament_id: TournamentRef, participant_id: int) -> None:
        """
        Before the tournament starts, delete a participant and fill in the
        abandoned seed. Once underway, mark the participant inactive,
        forfeiting their remaining matches.
        """
        tid = TournamentId.coerce(tournament_id)
        await self._api.delete(endpoints.participant(tid, participant_id))

    async def randomize_participants(self, tournament_id: TournamentRef) -> List[Participant]:
        """Randomize seeds among participants. Only applicable before a tournament has started."""
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.post(endpoints.participants_randomize(tid))
        return Participant.decode_index(data) if data is not None else []

    async def _participant_action(self, action: str, tournament_id: TournamentRef, participant_id: int) -> Participant:
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.post(endpoints.participant_action(tid, participant_id, action))
        return Participant.decode(data)

    # =========================================================================
    # Matches
    # =========================================================================

    async def match_index(
        self,
        tournament_id: TournamentRef,
        state: Optional[MatchState] = None,
        participant_id: Optional[int] = None,
    ) -> List[Match]:
        """Retrieve a tournament's match list."""
        tid = TournamentId.coerce(tournament_id)
        params: Dict[str, str] = {}
        if state is not None:
            params["state"] = str(state)
        if participant_id is not None:
            params["participant_id"] = str(participant_id)
        data = await self._api.get(endpoints.matches(tid), params=params)
        return Match.decode_index(data)

    async def get_match(
        self,
        tournament_id: TournamentRef,
        match_id: int,
        include_attachments: bool = False,
    ) -> Match:
        """Retrieve a single match record for a tournament."""
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.get(
            endpoints.match(tid, match_id),
            params={"include_attachments": query_flag(include_attachments)},
        )
        return Match.decode(data)

    async def update_match(self, tournament_id: TournamentRef, match_id: int, update: MatchUpdate) -> Match:
        """Update/submit the score(s) for a match."""
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.put(endpoints.match(tid, match_id), data=update.to_params())
        updated = Match.decode(data)
        self._logger.info(
            f"Match {match_id} in {tid}: scores={update.scores_csv!s} state={updated.state}",
            extra={"operation": "update_match"},
        )
        return updated

    # =========================================================================
    # Attachments
    # =========================================================================

    async def attachments_index(self, tournament_id: TournamentRef, match_id: int) -> List[Attachment]:
        """Retrieve a match's attachments."""
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.get(endpoints.attachments(tid, match_id))
        return Attachment.decode_index(data)

    async def get_attachment(self, tournament_id: TournamentRef, match_id: int, attachment_id: int) -> Attachment:
        """Retrieve a single match attachment record."""
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.get(endpoints.attachment(tid, match_id, attachment_id))
        return Attachment.decode(data)

    async def create_attachment(
        self,
        tournament_id: TournamentRef,
        match_id: int,
        attachment: AttachmentCreate,
    ) -> Attachment:
        """
        Add a file, link, or text attachment to a match. The tournament's
        accept_attachments attribute must be true.
        """
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.post(
            endpoints.attachments(tid, match_id),
            data=attachment.to_params(),
            files=attachment.to_files(),
        )
        return Attachment.decode(data)

    async def update_attachment(
        self,
        tournament_id: TournamentRef,
        match_id: int,
        attachment_id: int,
        attachment: AttachmentCreate,
    ) -> Attachment:
        """Update the attributes of a match attachment."""
        tid = TournamentId.coerce(tournament_id)
        data = await self._api.put(
            endpoints.attachment(tid, match_id, attachment_id),
            data=attachment.to_params(),
            files=attachment.to_files(),
        )
        return Attachment.decode(data)

    async def delete_attachment(self, tournament_id: TournamentRef, match_id: int, attachment_id: int) -> None:
        """Delete a match attachment."""
        tid = TournamentId.coerce(tournament_id)
        await self._api.delete(endpoints.attachment(tid, match_id, attachment_id))
