"""
Participants
------------
Tournament entrants and the payload for adding them.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, List, Optional

from pydantic import field_validator

from .base import ChallongeModel, FormPairs, OptionalTimestamp, form_value, unwrap_list
from .match import Match

PREFIX = "participant"


class Participant(ChallongeModel):
    """Challonge participant record."""

    ENVELOPE: ClassVar[str] = "participant"

    id: int
    tournament_id: int
    seed: int
    name: str = ""
    active: bool = False
    misc: str = ""
    icon: str = ""
    final_rank: Optional[int] = None
    group_id: Optional[int] = None
    invitation_id: Optional[int] = None
    invite_email: str = ""
    on_waiting_list: bool = False
    challonge_username: str = ""
    challonge_email_address_verified: str = ""
    removable: bool = False
    participatable_or_invitation_attached: bool = False
    confirm_remove: bool = False
    invitation_pending: bool = False
    display_name_with_invitation_email_address: str = ""
    email_hash: str = ""
    username: str = ""
    attached_participatable_portrait_url: str = ""
    can_check_in: bool = False
    checked_in: bool = False
    reactivatable: bool = False
    checked_in_at: OptionalTimestamp = None
    created_at: datetime
    updated_at: datetime
    matches: List[Match] = []

    @field_validator("challonge_email_address_verified", mode="before")
    @classmethod
    def _verified_text(cls, value: Any) -> str:
        # Sent as a boolean by the service; only textual values are kept
        return value if isinstance(value, str) else ""

    @field_validator("matches", mode="before")
    @classmethod
    def _unwrap_matches(cls, value: Any) -> Any:
        return unwrap_list(value, Match.ENVELOPE)

    @property
    def display_name(self) -> str:
        return self.name or self.challonge_username or self.display_name_with_invitation_email_address


@dataclass
class ParticipantCreate:
    """
    Payload for adding or updating a participant.

    name is not required when email or challonge_username is provided and
    must be unique per tournament. An email that matches a Challonge account
    behaves like challonge_username; otherwise the address is invited to sign
    up. seed must be between 1 and the participant count (including the new
    record); taking an existing seed bumps the others down. misc (max 255
    characters) is only visible through the API.
    """
    name: Optional[str] = None
    challonge_username: Optional[str] = None
    email: str = ""
    seed: int = 1
    misc: str = ""

    def to_params(self, bulk: bool = False) -> FormPairs:
        # email leads each group: the bulk form starts a new record whenever
        # the first key repeats
        prefix = f"{PREFIX}[]" if bulk else PREFIX
        params: FormPairs = [
            (f"{prefix}[email]", form_value(self.email)),
            (f"{prefix}[seed]", form_value(self.seed)),
            (f"{prefix}[misc]", form_value(self.misc)),
        ]
        if self.name is not None:
            params.append((f"{prefix}[name]", form_value(self.name)))
        if self.challonge_username is not None:
            params.append((f"{prefix}[challonge_username]", form_value(self.challonge_username)))
        return params


def bulk_params(participants: List[ParticipantCreate]) -> FormPairs:
    """Form pairs for the bulk_add endpoint, participant order preserved."""
    params: FormPairs = []
    for participant in participants:
        params.extend(participant.to_params(bulk=True))
    return params
