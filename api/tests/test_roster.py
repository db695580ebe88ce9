import pytest

from wasilah import repo
from wasilah.errors import RosterError
from wasilah.services.roster import import_csv, import_records, read_csv, validate_batch


def test_read_csv_normalizes_headers_and_skips_blank_rows():
    content = "\ufeffID,First_Name,Gender,Email\n1,Aisha,F,AISHA@Example.com\n,,,\n2,Bilal,brother,\n".encode("utf-8")
    rows = read_csv(content)
    assert [r["id"] for r in rows] == ["1", "2"]

    records, errors = validate_batch(rows)
    assert errors == []
    assert records[0].gender == "female"
    assert records[0].email == "aisha@example.com"
    assert records[1].gender == "male"
    assert records[1].email is None


def test_read_csv_requires_id_and_first_name():
    with pytest.raises(RosterError) as exc:
        read_csv("id,name\n1,Aisha\n")
    assert "first_name" in exc.value.message


def test_invalid_rows_are_reported_not_dropped():
    records, errors = validate_batch(
        [
            {"id": "x", "first_name": "Aisha"},
            {"id": "2", "first_name": ""},
            {"id": "3", "first_name": "Cyrus", "gender": "robot"},
            {"id": "4", "first_name": "Dina", "email": "not-an-email"},
            {"id": "5", "first_name": "Eman"},
        ]
    )
    assert [r.id for r in records] == [5]
    assert len(errors) == 4
    assert errors[0].startswith("Row 1:")


def test_duplicate_ids_in_batch_reject_every_copy():
    summary = import_records(
        [
            {"id": 1, "first_name": "Aisha"},
            {"id": 2, "first_name": "Bilal"},
            {"id": 1, "first_name": "Amina"},
        ]
    )
    assert summary.participants_added == 1
    assert repo.get_participant_by_id(1) is None
    assert sum("duplicate id 1" in e for e in summary.errors) == 2


def test_tokens_are_unique_and_unguessable_length():
    import_records([{"id": i, "first_name": f"P{i}"} for i in range(1, 21)])
    tokens = [row["token"] for row in repo.list_participants()]
    assert len(set(tokens)) == 20
    assert all(len(t) >= 32 for t in tokens)


def test_reimport_keeps_existing_tokens():
    csv_text = "id,first_name,email\n1,Aisha,aisha@example.com\n2,Bilal,bilal@example.com\n"
    import_csv(csv_text)
    before = {r["id"]: r["token"] for r in repo.list_participants()}

    summary = import_csv(csv_text + "3,Cyrus,cyrus@example.com\n")
    after = {r["id"]: r["token"] for r in repo.list_participants()}

    assert summary.participants_added == 1
    assert summary.participants_unchanged == 2
    assert after[1] == before[1]
    assert after[2] == before[2]


def test_reimport_with_changed_identity_is_rejected():
    import_csv("id,first_name,email\n1,Aisha,aisha@example.com\n")
    token = repo.get_participant_by_id(1)["token"]

    summary = import_csv("id,first_name,email\n1,Amina,amina@example.com\n")
    assert summary.participants_added == 0
    assert summary.errors == ["id 1 is already registered to a different participant"]
    assert repo.get_participant_by_id(1)["token"] == token
    assert repo.get_participant_by_id(1)["first_name"] == "Aisha"


def test_id_beyond_column_range_is_reported_beside_valid_rows():
    summary = import_records(
        [
            {"id": 1, "first_name": "Aisha"},
            {"id": 10**20, "first_name": "Bilal"},
        ]
    )
    assert summary.participants_added == 1
    assert len(summary.errors) == 1
    assert summary.errors[0].startswith("Row 2: id must be at most")
    assert repo.get_participant_by_id(1) is not None


def test_id_taken_by_concurrent_import_is_reported(monkeypatch):
    import_records([{"id": 1, "first_name": "Aisha"}])
    token = repo.get_participant_by_id(1)["token"]

    # the other import committed after this one looked up existing ids
    monkeypatch.setattr(repo, "fetch_participants_by_ids", lambda db, ids: {})
    summary = import_records([{"id": 1, "first_name": "Amina"}, {"id": 2, "first_name": "Bilal"}])

    assert summary.participants_added == 1
    assert summary.errors == ["id 1 was registered by another import while this one ran"]
    assert repo.get_participant_by_id(1)["token"] == token
    assert repo.get_participant_by_id(1)["first_name"] == "Aisha"
