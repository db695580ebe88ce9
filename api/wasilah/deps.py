from fastapi import HTTPException

from .errors import SelectionError, WasilahError

STATUS_BY_CODE = {
    SelectionError.INVALID_TOKEN: 404,
    "data_integrity": 409,
}


def raise_for_error(exc: WasilahError) -> None:
    raise HTTPException(status_code=STATUS_BY_CODE.get(exc.code, 400), detail=exc.to_detail()) from exc
