from __future__ import annotations

import csv
import io
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable

from .. import repo
from ..database import SessionLocal
from ..errors import RosterError
from .access import mint_token

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("id", "first_name")
GENDER_ALIASES = {
    "male": "male",
    "m": "male",
    "man": "male",
    "brother": "male",
    "female": "female",
    "f": "female",
    "woman": "female",
    "sister": "female",
}
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass
class RosterRecord:
    id: int
    first_name: str
    gender: str | None = None
    email: str | None = None

    def identity(self) -> tuple[str, str]:
        return (self.first_name.strip().lower(), (self.email or "").strip().lower())


@dataclass
class ImportSummary:
    participants_added: int = 0
    participants_unchanged: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "participants_added": self.participants_added,
            "participants_unchanged": self.participants_unchanged,
            "errors": self.errors,
        }


def normalize_gender(value: Any) -> str | None:
    if value is None:
        return None
    v = str(value).strip().lower()
    if not v:
        return None
    if v not in GENDER_ALIASES:
        raise ValueError(f"gender must be male or female, got {value!r}")
    return GENDER_ALIASES[v]


def normalize_email(value: Any) -> str | None:
    if value is None:
        return None
    e = str(value).strip().lower()
    if not e:
        return None
    if len(e) > 254 or not EMAIL_RE.match(e):
        raise ValueError(f"invalid email {value!r}")
    return e


def parse_record(raw: dict[str, Any]) -> RosterRecord:
    raw_id = str(raw.get("id") if raw.get("id") is not None else "").strip()
    if not raw_id:
        raise ValueError("id is required")
    try:
        participant_id = int(raw_id)
    except ValueError:
        raise ValueError(f"id must be an integer, got {raw_id!r}")
    if participant_id <= 0:
        raise ValueError(f"id must be positive, got {participant_id}")
    if participant_id > repo.MAX_PARTICIPANT_ID:
        raise ValueError(f"id must be at most {repo.MAX_PARTICIPANT_ID}, got {participant_id}")

    first_name = str(raw.get("first_name") or "").strip()
    if not first_name:
        raise ValueError("first_name is required")
    if len(first_name) > 120:
        raise ValueError("first_name must be 120 characters or fewer")

    return RosterRecord(
        id=participant_id,
        first_name=first_name,
        gender=normalize_gender(raw.get("gender")),
        email=normalize_email(raw.get("email")),
    )


def read_csv(content: bytes | str) -> list[dict[str, Any]]:
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise RosterError("Roster must be UTF-8 encoded CSV") from exc

    reader = csv.DictReader(io.StringIO(content))
    if not reader.fieldnames:
        raise RosterError("Roster is empty")

    header = [(name or "").strip().lower() for name in reader.fieldnames]
    missing = [col for col in REQUIRED_COLUMNS if col not in header]
    if missing:
        raise RosterError(f"Roster is missing required column(s): {', '.join(missing)}")

    rows: list[dict[str, Any]] = []
    for raw in reader:
        row = {(k or "").strip().lower(): v for k, v in raw.items() if k is not None}
        if not any(str(v or "").strip() for v in row.values()):
            continue
        rows.append(row)
    return rows


def validate_batch(rows: Iterable[dict[str, Any]]) -> tuple[list[RosterRecord], list[str]]:
    """Parse rows and drop every record whose id appears more than once."""
    parsed: list[tuple[int, RosterRecord]] = []
    errors: list[str] = []
    for line, raw in enumerate(rows, start=1):
        try:
            parsed.append((line, parse_record(raw)))
        except ValueError as exc:
            errors.append(f"Row {line}: {exc}")

    counts = Counter(rec.id for _, rec in parsed)
    records: list[RosterRecord] = []
    for line, rec in parsed:
        if counts[rec.id] > 1:
            errors.append(f"Row {line}: duplicate id {rec.id} ({counts[rec.id]} rows share it)")
            continue
        records.append(rec)
    return records, errors


def import_records(rows: Iterable[dict[str, Any]]) -> ImportSummary:
    records, errors = validate_batch(rows)
    summary = ImportSummary(errors=errors)

    with SessionLocal() as db:
        existing = repo.fetch_participants_by_ids(db, (rec.id for rec in records))
        for rec in records:
            current = existing.get(rec.id)
            if current is not None:
                stored = RosterRecord(id=rec.id, first_name=current["first_name"], email=current.get("email"))
                if stored.identity() == rec.identity():
                    summary.participants_unchanged += 1
                else:
                    summary.errors.append(f"id {rec.id} is already registered to a different participant")
                continue
            inserted = repo.insert_participant(
                db,
                participant_id=rec.id,
                first_name=rec.first_name,
                gender=rec.gender,
                email=rec.email,
                token=mint_token(),
            )
            if not inserted:
                summary.errors.append(f"id {rec.id} was registered by another import while this one ran")
                continue
            summary.participants_added += 1
        db.commit()

    logger.info(
        "[roster] import added=%d unchanged=%d errors=%d",
        summary.participants_added,
        summary.participants_unchanged,
        len(summary.errors),
    )
    return summary


def import_csv(content: bytes | str) -> ImportSummary:
    return import_records(read_csv(content))
