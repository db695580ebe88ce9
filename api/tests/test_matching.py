import pytest

from wasilah.errors import DataIntegrityError
from wasilah.services.matching import (
    MutualMatch,
    SelectionRow,
    canonical_pair,
    compute_score,
    find_mutual_matches,
    match_counts,
    score_tier,
)


def _sel(a, b, rank):
    return SelectionRow(participant_id=a, selected_id=b, rank=rank)


def test_reciprocal_selection_yields_one_match():
    matches = find_mutual_matches([_sel(1, 2, 0), _sel(2, 1, 0)])
    assert matches == [MutualMatch(participant1_id=1, participant2_id=2, rank1=0, rank2=0)]


def test_one_sided_selection_yields_nothing():
    assert find_mutual_matches([_sel(1, 2, 0)]) == []
    assert find_mutual_matches([]) == []


def test_pair_emitted_once_regardless_of_insertion_order():
    forward = find_mutual_matches([_sel(1, 2, 3), _sel(2, 1, 1)])
    backward = find_mutual_matches([_sel(2, 1, 1), _sel(1, 2, 3)])
    assert forward == backward
    assert len(forward) == 1
    assert (forward[0].rank1, forward[0].rank2) == (3, 1)


def test_ranks_follow_canonical_direction():
    [match] = find_mutual_matches([_sel(9, 4, 2), _sel(4, 9, 0)])
    assert (match.participant1_id, match.participant2_id) == (4, 9)
    assert match.rank1 == 0
    assert match.rank2 == 2
    assert match.id == "4-9"


@pytest.mark.parametrize(
    "rank1,rank2,expected",
    [(0, 0, 100), (1, 1, 80), (0, 4, 60), (6, 7, -30)],
)
def test_score_formula(rank1, rank2, expected):
    assert compute_score(rank1, rank2) == expected


def test_score_tiers():
    assert score_tier(100) == "excellent"
    assert score_tier(90) == "excellent"
    assert score_tier(80) == "great"
    assert score_tier(70) == "great"
    assert score_tier(60) == "good"
    assert score_tier(-10) == "good"


def test_output_sorted_by_score_then_pair():
    selections = [
        _sel(1, 2, 1), _sel(2, 1, 0),   # 90
        _sel(3, 4, 0), _sel(4, 3, 0),   # 100
        _sel(1, 5, 0), _sel(5, 1, 1),   # 90
        _sel(6, 7, 2), _sel(7, 6, 2),   # 60
    ]
    pairs = [(m.participant1_id, m.participant2_id, m.score) for m in find_mutual_matches(selections)]
    assert pairs == [(3, 4, 100), (1, 2, 90), (1, 5, 90), (6, 7, 60)]


def test_repeated_runs_are_identical():
    selections = [_sel(a, b, r) for a, b, r in [(1, 2, 0), (2, 1, 2), (2, 3, 0), (3, 2, 1), (1, 3, 1), (3, 1, 0)]]
    first = find_mutual_matches(selections)
    second = find_mutual_matches(list(reversed(selections)))
    assert first == second


def test_self_selection_is_skipped():
    matches = find_mutual_matches([_sel(1, 1, 0), _sel(1, 2, 1), _sel(2, 1, 0)])
    assert [m.id for m in matches] == ["1-2"]


def test_unknown_participant_fails_whole_run():
    selections = [_sel(1, 2, 0), _sel(2, 1, 0), _sel(2, 99, 1)]
    with pytest.raises(DataIntegrityError) as exc:
        find_mutual_matches(selections, participant_ids={1, 2})
    assert exc.value.code == "data_integrity"
    assert exc.value.rows == [{"participant_id": 2, "selected_id": 99, "rank": 1, "missing": ["selected_id"]}]


def test_canonical_pair_and_counts():
    assert canonical_pair(7, 3) == (3, 7)
    matches = [
        MutualMatch(participant1_id=1, participant2_id=2, rank1=0, rank2=0),
        MutualMatch(participant1_id=1, participant2_id=3, rank1=1, rank2=0),
    ]
    assert match_counts(matches) == {1: 2, 2: 1, 3: 1}
