from wasilah import repo
from wasilah.services.access import mint_token, resolve_token


def test_resolve_unknown_token_returns_none(roster):
    assert resolve_token("not-a-real-token") is None
    assert resolve_token("") is None


def test_resolve_excludes_self_and_private_fields(roster):
    resolution = resolve_token(roster[1])
    assert resolution.participant == {"id": 1, "first_name": "Aisha", "gender": "female"}
    assert [c["id"] for c in resolution.candidates] == [2, 3, 4, 5]
    assert all(set(c) == {"id", "first_name", "gender"} for c in resolution.candidates)
    assert resolution.current_selections == []


def test_resolve_returns_existing_selections_in_rank_order(roster):
    repo.replace_selections(1, [4, 2, 3])
    payload = resolve_token(roster[1]).as_dict()
    assert payload["current_selections"] == [
        {"selected_id": 4, "rank": 0},
        {"selected_id": 2, "rank": 1},
        {"selected_id": 3, "rank": 2},
    ]
    assert "available_participants" in payload


def test_mint_token_is_url_safe():
    token = mint_token()
    assert token != mint_token()
    assert all(ch.isalnum() or ch in "-_" for ch in token)
