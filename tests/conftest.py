"""
Challonge Client Test Configuration
-----------------------------------
Shared fixtures and configuration for all tests.

No test talks to the real service: requests are answered by an
httpx.MockTransport that records what was sent.
"""

import os
import sys
from pathlib import Path
from typing import List

import httpx
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from api.challonge import Challonge
from infra.config import ClientSettings
from infra.logging import reset_logging


# =============================================================================
# Test Isolation
# =============================================================================

@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Hide CHALLONGE_* variables of the developer's shell from tests."""
    for key in list(os.environ):
        if key.startswith("CHALLONGE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def clean_logging():
    """Drop handlers installed by configure_logging()."""
    yield
    reset_logging()


@pytest.fixture(scope="session")
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


# =============================================================================
# Fake API
# =============================================================================

class FakeAPI:
    """
    Transport handler that records requests and replays queued responses
    in order. An unexpected request fails the test.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses: list = []

    def reply(self, status_code: int = 200, json=None, **kwargs) -> "FakeAPI":
        self._responses.append(("response", status_code, json, kwargs))
        return self

    def fail(self, exc_type=httpx.ConnectError, message: str = "connection reset") -> "FakeAPI":
        self._responses.append(("raise", exc_type, message, None))
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")

        kind, first, second, kwargs = self._responses.pop(0)
        if kind == "raise":
            raise first(second, request=request)
        if second is None:
            return httpx.Response(first, **kwargs)
        return httpx.Response(first, json=second, **kwargs)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def pending(self) -> int:
        return len(self._responses)


@pytest.fixture
def fake_api():
    return FakeAPI()


@pytest.fixture
def test_settings():
    """Settings that never make a test wait on the local rate limiter."""
    return ClientSettings(
        base_url="https://api.challonge.com/v1",
        rate_limit_requests=6000,
        rate_limit_burst=100,
    )


@pytest.fixture
def challonge(fake_api, test_settings):
    """Client wired to the fake API with retry delays disabled."""
    return Challonge(
        "testuser",
        "testkey",
        settings=test_settings,
        transport=httpx.MockTransport(fake_api),
        retry_delay_factor=0.0,
    )


# =============================================================================
# Sample Payloads
# =============================================================================

@pytest.fixture
def tournament_payload():
    return {
        "tournament": {
            "accept_attachments": False,
            "allow_participant_match_reporting": True,
            "anonymous_voting": False,
            "category": None,
            "check_in_duration": None,
            "completed_at": None,
            "created_at": "2015-01-19T16:47:30-05:00",
            "created_by_api": False,
            "credit_capped": False,
            "description": "sample description",
            "game_id": 600,
            "group_stages_enabled": False,
            "hide_forum": False,
            "hide_seeds": False,
            "hold_third_place_match": False,
            "id": 1086875,
            "max_predictions_per_user": 1,
            "name": "Sample Tournament 1",
            "notify_users_when_matches_open": True,
            "notify_users_when_the_tournament_ends": True,
            "open_signup": False,
            "participants_count": 4,
            "prediction_method": 0,
            "predictions_opened_at": None,
            "private": False,
            "progress_meter": 0,
            "pts_for_bye": "1.0",
            "pts_for_game_tie": "0.0",
            "pts_for_game_win": "0.0",
            "pts_for_match_tie": "0.5",
            "pts_for_match_win": "1.0",
            "quick_advance": False,
            "ranked_by": "match wins",
            "require_score_agreement": False,
            "rr_pts_for_game_tie": "0.0",
            "rr_pts_for_game_win": "0.0",
            "rr_pts_for_match_tie": "0.5",
            "rr_pts_for_match_win": "1.0",
            "sequential_pairings": False,
            "show_rounds": True,
            "signup_cap": None,
            "start_at": None,
            "started_at": "2015-01-19T16:57:17-05:00",
            "started_checking_in_at": None,
            "state": "underway",
            "swiss_rounds": 0,
            "teams": False,
            "tie_breaks": ["match wins vs tied", "game wins", "points scored"],
            "tournament_type": "single elimination",
            "updated_at": "2015-01-19T16:57:17-05:00",
            "url": "sample_tournament_1",
            "description_source": "sample description source",
            "subdomain": None,
            "full_challonge_url": "http://challonge.com/sample_tournament_1",
            "live_image_url": "http://images.challonge.com/sample_tournament_1.png",
            "sign_up_url": None,
            "review_before_finalizing": True,
            "accepting_predictions": False,
            "participants_locked": True,
            "game_name": "Table Tennis",
            "participants_swappable": False,
            "team_convertable": False,
            "group_stages_were_started": False,
        }
    }


@pytest.fixture
def participant_payload():
    return {
        "participant": {
            "active": True,
            "checked_in_at": None,
            "created_at": "2015-01-19T16:54:40-05:00",
            "final_rank": None,
            "group_id": None,
            "icon": None,
            "id": 16543993,
            "invitation_id": None,
            "invite_email": None,
            "misc": None,
            "name": "Participant #1",
            "on_waiting_list": False,
            "seed": 1,
            "tournament_id": 1086875,
            "updated_at": "2015-01-19T16:54:40-05:00",
            "challonge_username": None,
            "challonge_email_address_verified": None,
            "removable": True,
            "participatable_or_invitation_attached": False,
            "confirm_remove": True,
            "invitation_pending": False,
            "display_name_with_invitation_email_address": "Participant #1",
            "email_hash": None,
            "username": None,
            "attached_participatable_portrait_url": None,
            "can_check_in": False,
            "checked_in": False,
            "reactivatable": False,
        }
    }


@pytest.fixture
def match_payload():
    return {
        "match": {
            "attachment_count": None,
            "created_at": "2015-01-19T16:57:17-05:00",
            "group_id": None,
            "has_attachment": False,
            "id": 23575258,
            "identifier": "A",
            "location": None,
            "loser_id": None,
            "player1_id": 16543993,
            "player1_is_prereq_match_loser": False,
            "player1_prereq_match_id": None,
            "player1_votes": None,
            "player2_id": 16543997,
            "player2_is_prereq_match_loser": False,
            "player2_prereq_match_id": None,
            "player2_votes": 3,
            "round": 1,
            "scheduled_time": None,
            "started_at": "2015-01-19T16:57:17-05:00",
            "state": "open",
            "tournament_id": 1086875,
            "underway_at": None,
            "updated_at": "2015-01-19T16:57:17-05:00",
            "winner_id": None,
            "prerequisite_match_ids_csv": "",
            "scores_csv": "3-1, 3-2",
        }
    }


@pytest.fixture
def attachment_payload():
    return {
        "match_attachment": {
            "id": 165418,
            "match_id": 65187924,
            "user_id": 979950,
            "description": "discord",
            "url": "",
            "original_file_name": None,
            "created_at": "2016-07-02T13:24:09.899-04:00",
            "updated_at": "2016-07-02T13:24:09.899-04:00",
            "asset_file_name": None,
            "asset_content_type": None,
            "asset_file_size": None,
            "asset_url": None,
        }
    }
