from typing import Any, Iterable

from sqlalchemy import bindparam, text

from .database import SessionLocal
from .services.matching import MutualMatch, SelectionRow, sort_matches


PUBLIC_PARTICIPANT_COLUMNS = "id, first_name, gender"
# participant.id is a 32-bit INTEGER column
MAX_PARTICIPANT_ID = 2**31 - 1


def get_participant_by_token(token: str) -> dict[str, Any] | None:
    if not token:
        return None
    with SessionLocal() as db:
        row = db.execute(
            text("SELECT id, first_name, gender, email, token FROM participant WHERE token=:token"),
            {"token": token},
        ).mappings().first()
    return dict(row) if row else None


def get_participant_by_id(participant_id: int) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(
            text("SELECT id, first_name, gender, email, token FROM participant WHERE id=:id"),
            {"id": participant_id},
        ).mappings().first()
    return dict(row) if row else None


def list_participants() -> list[dict[str, Any]]:
    with SessionLocal() as db:
        rows = db.execute(
            text(
                """
                SELECT p.id, p.first_name, p.gender, p.email, p.token, p.selections_submitted_at,
                       COUNT(s.selected_id) AS selection_count
                FROM participant p
                LEFT JOIN selection s ON s.participant_id = p.id
                GROUP BY p.id, p.first_name, p.gender, p.email, p.token, p.selections_submitted_at
                ORDER BY p.id ASC
                """
            )
        ).mappings().all()
    return [dict(r) for r in rows]


def list_candidates(exclude_participant_id: int) -> list[dict[str, Any]]:
    with SessionLocal() as db:
        rows = db.execute(
            text(
                f"""
                SELECT {PUBLIC_PARTICIPANT_COLUMNS}
                FROM participant
                WHERE id <> :id
                ORDER BY id ASC
                """
            ),
            {"id": exclude_participant_id},
        ).mappings().all()
    return [dict(r) for r in rows]


def participant_names() -> dict[int, str]:
    with SessionLocal() as db:
        rows = db.execute(text("SELECT id, first_name FROM participant")).mappings().all()
    return {int(r["id"]): str(r["first_name"]) for r in rows}


def fetch_participants_by_ids(db, participant_ids: Iterable[int]) -> dict[int, dict[str, Any]]:
    ids = sorted({int(pid) for pid in participant_ids})
    if not ids:
        return {}
    stmt = text(
        "SELECT id, first_name, gender, email, token FROM participant WHERE id IN :ids"
    ).bindparams(bindparam("ids", expanding=True))
    rows = db.execute(stmt, {"ids": ids}).mappings().all()
    return {int(r["id"]): dict(r) for r in rows}


def existing_participant_ids(participant_ids: Iterable[int]) -> set[int]:
    with SessionLocal() as db:
        return set(fetch_participants_by_ids(db, participant_ids).keys())


def insert_participant(db, *, participant_id: int, first_name: str, gender: str | None, email: str | None, token: str) -> bool:
    """Insert a participant; returns False when the id was taken by another writer."""
    result = db.execute(
        text(
            """
            INSERT INTO participant (id, first_name, gender, email, token)
            VALUES (:id, :first_name, :gender, :email, :token)
            ON CONFLICT (id) DO NOTHING
            """
        ),
        {"id": participant_id, "first_name": first_name, "gender": gender, "email": email, "token": token},
    )
    return result.rowcount == 1


def get_selections(participant_id: int) -> list[dict[str, Any]]:
    with SessionLocal() as db:
        rows = db.execute(
            text(
                """
                SELECT selected_id, rank
                FROM selection
                WHERE participant_id=:participant_id
                ORDER BY rank ASC
                """
            ),
            {"participant_id": participant_id},
        ).mappings().all()
    return [dict(r) for r in rows]


def replace_selections(participant_id: int, ranked_ids: list[int]) -> int:
    """Swap a participant's whole selection set in one transaction.

    The leading UPDATE takes the participant's row lock, so two submissions
    for the same participant serialize instead of interleaving.
    """
    with SessionLocal() as db:
        db.execute(
            text("UPDATE participant SET selections_submitted_at=CURRENT_TIMESTAMP WHERE id=:id"),
            {"id": participant_id},
        )
        db.execute(
            text("DELETE FROM selection WHERE participant_id=:participant_id"),
            {"participant_id": participant_id},
        )
        if ranked_ids:
            db.execute(
                text(
                    """
                    INSERT INTO selection (participant_id, selected_id, rank)
                    VALUES (:participant_id, :selected_id, :rank)
                    """
                ),
                [
                    {"participant_id": participant_id, "selected_id": selected_id, "rank": rank}
                    for rank, selected_id in enumerate(ranked_ids)
                ],
            )
        db.commit()
    return len(ranked_ids)


def fetch_selection_snapshot(db) -> tuple[list[SelectionRow], set[int]]:
    """All selections plus the ids that resolved to a participant, read in one statement."""
    rows = db.execute(
        text(
            """
            SELECT s.participant_id, s.selected_id, s.rank,
                   chooser.id AS chooser_id, chosen.id AS chosen_id
            FROM selection s
            LEFT JOIN participant chooser ON chooser.id = s.participant_id
            LEFT JOIN participant chosen ON chosen.id = s.selected_id
            ORDER BY s.participant_id ASC, s.rank ASC
            """
        )
    ).mappings().all()

    selections: list[SelectionRow] = []
    known: set[int] = set()
    for r in rows:
        selections.append(
            SelectionRow(participant_id=int(r["participant_id"]), selected_id=int(r["selected_id"]), rank=int(r["rank"]))
        )
        if r["chooser_id"] is not None:
            known.add(int(r["chooser_id"]))
        if r["chosen_id"] is not None:
            known.add(int(r["chosen_id"]))
    return selections, known


def save_mutual_matches(db, matches: list[MutualMatch]) -> int:
    db.execute(text("DELETE FROM mutual_match"))
    if matches:
        db.execute(
            text(
                """
                INSERT INTO mutual_match (participant1_id, participant2_id, rank1, rank2, score)
                VALUES (:participant1_id, :participant2_id, :rank1, :rank2, :score)
                """
            ),
            [
                {
                    "participant1_id": m.participant1_id,
                    "participant2_id": m.participant2_id,
                    "rank1": m.rank1,
                    "rank2": m.rank2,
                    "score": m.score,
                }
                for m in matches
            ],
        )
    return len(matches)


def list_mutual_matches() -> list[MutualMatch]:
    with SessionLocal() as db:
        rows = db.execute(
            text("SELECT participant1_id, participant2_id, rank1, rank2 FROM mutual_match")
        ).mappings().all()
    return sort_matches(
        MutualMatch(
            participant1_id=int(r["participant1_id"]),
            participant2_id=int(r["participant2_id"]),
            rank1=int(r["rank1"]),
            rank2=int(r["rank2"]),
        )
        for r in rows
    )


def clear_all() -> dict[str, int]:
    counts: dict[str, int] = {}
    with SessionLocal() as db:
        for table in ("mutual_match", "selection", "participant"):
            result = db.execute(text(f"DELETE FROM {table}"))
            counts[table] = int(result.rowcount or 0)
        db.commit()
    return counts
