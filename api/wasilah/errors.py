"""Domain errors raised by the roster, selection and matching services."""

from __future__ import annotations

from typing import Any


class WasilahError(Exception):
    """Base error carrying a machine-readable code and a human reason."""

    code = "error"

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        if code:
            self.code = code
        super().__init__(message)

    def to_detail(self) -> dict[str, Any]:
        return {"success": False, "error": self.code, "message": self.message}


class SelectionError(WasilahError):
    """A selection submission was rejected; nothing was written."""

    INVALID_TOKEN = "invalid_token"
    UNKNOWN_PARTICIPANT = "unknown_participant"
    SELF_SELECTION = "self_selection"
    DUPLICATE_SELECTION = "duplicate_selection"
    INVALID_RANK = "invalid_rank"


class RosterError(WasilahError):
    """The uploaded roster could not be read at all."""

    code = "invalid_roster"


class DataIntegrityError(WasilahError):
    """Stored selections reference participants that do not exist."""

    code = "data_integrity"

    def __init__(self, message: str, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows = rows or []
        super().__init__(message)

    def to_detail(self) -> dict[str, Any]:
        detail = super().to_detail()
        detail["errors"] = self.rows
        return detail
