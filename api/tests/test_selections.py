import pytest

from wasilah import repo
from wasilah.errors import SelectionError
from wasilah.services.selections import normalize_submission, submit_selections


def _stored(pid):
    return [(s["selected_id"], s["rank"]) for s in repo.get_selections(pid)]


def test_ranks_follow_submission_order(roster):
    submit_selections(roster[1], [5, 2, 4])
    assert _stored(1) == [(5, 0), (2, 1), (4, 2)]


def test_resubmitting_same_list_is_idempotent(roster):
    submit_selections(roster[1], [3, 2])
    submit_selections(roster[1], [3, 2])
    assert _stored(1) == [(3, 0), (2, 1)]


def test_resubmission_replaces_whole_set(roster):
    submit_selections(roster[1], [3, 2, 4])
    submit_selections(roster[1], [4])
    assert _stored(1) == [(4, 0)]


def test_empty_submission_clears_selections(roster):
    submit_selections(roster[1], [2])
    out = submit_selections(roster[1], [])
    assert out["selections"] == []
    assert _stored(1) == []


@pytest.mark.parametrize(
    "items,code",
    [
        ([2, 1, 3], SelectionError.SELF_SELECTION),
        ([2, 3, 2], SelectionError.DUPLICATE_SELECTION),
        ([2, 42], SelectionError.UNKNOWN_PARTICIPANT),
        (["abc"], SelectionError.UNKNOWN_PARTICIPANT),
        ([2, 10**20], SelectionError.UNKNOWN_PARTICIPANT),
        ([{"id": 2**31, "rank": 0}], SelectionError.UNKNOWN_PARTICIPANT),
        ([{"id": 2, "rank": 0}, {"id": 3, "rank": 2}], SelectionError.INVALID_RANK),
        ([{"id": 2, "rank": 0}, {"id": 3}], SelectionError.INVALID_RANK),
        ([{"id": 2, "rank": 0}, 3], SelectionError.INVALID_RANK),
    ],
)
def test_invalid_submission_is_rejected_entirely(roster, items, code):
    submit_selections(roster[1], [4, 5])
    with pytest.raises(SelectionError) as exc:
        submit_selections(roster[1], items)
    assert exc.value.code == code
    assert _stored(1) == [(4, 0), (5, 1)]


def test_invalid_token_is_rejected(roster):
    with pytest.raises(SelectionError) as exc:
        submit_selections("bogus", [2])
    assert exc.value.code == SelectionError.INVALID_TOKEN


def test_explicit_ranks_are_reordered():
    items = [{"id": 7, "rank": 2}, {"id": 3, "rank": 0}, {"id": 5, "rank": 1}]
    assert normalize_submission(items) == [3, 5, 7]


def test_objects_without_rank_use_position():
    assert normalize_submission([{"id": "9"}, {"id": 4}]) == [9, 4]
