"""POST /v1/mapping/* - Read uploaded sheets and suggest a column mapping from their headers"""

import logging
import shutil
import tempfile
from pathlib import Path

from fastapi import APIRouter, File, HTTPException, Request, UploadFile

from collections_kpi.api.dependencies import get_request_id
from collections_kpi.api.v1.schemas import MappingDetectRequest, MappingDetectResponse, SpreadsheetUploadResponse
from collections_kpi.domain.exceptions import SpreadsheetReadError
from collections_kpi.domain.normalizer import detect_field_mapping, missing_required_fields
from collections_kpi.infrastructure.loaders.spreadsheet import read_spreadsheet

router = APIRouter()


@router.post("/mapping/detect", response_model=MappingDetectResponse)
def detect_mapping(body: MappingDetectRequest):
    mapping = detect_field_mapping(body.columns)
    return MappingDetectResponse(mapping=mapping, missing_required=missing_required_fields(mapping))


@router.post("/mapping/upload", response_model=SpreadsheetUploadResponse)
def upload_spreadsheet(request: Request, file: UploadFile = File(...)):
    """
    Parse an .xlsx or .csv upload.

    Returns the header row, the raw rows and a suggested mapping; the rows and
    (possibly edited) mapping are then posted to the analytics endpoints.
    """
    suffix = Path(file.filename or "").suffix.lower()
    with tempfile.TemporaryDirectory() as tmp_dir:
        path = Path(tmp_dir) / f"upload{suffix}"
        with path.open("wb") as out:
            shutil.copyfileobj(file.file, out)
        try:
            columns, rows = read_spreadsheet(path)
        except SpreadsheetReadError as e:
            logging.warning(
                f"Rejected upload: {e}",
                extra={"request_id": get_request_id(request), "upload_filename": file.filename},
            )
            raise HTTPException(status_code=422, detail=str(e))

    mapping = detect_field_mapping(columns)
    return SpreadsheetUploadResponse(
        filename=file.filename or "",
        columns=columns,
        rows=rows,
        mapping=mapping,
        missing_required=missing_required_fields(mapping),
    )
