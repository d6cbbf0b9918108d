from __future__ import annotations

from functools import lru_cache
import hmac
import logging
from typing import Optional

from fastapi import Depends, FastAPI, File, Header, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import (
    LatestDataResponse,
    ParseResponse,
    SaveDataRequest,
    SaveDataResponse,
    UploadResponse,
)
from govdash.config import Settings, load_settings
from govdash.models import record_from_dict, record_to_dict
from govdash.parser import parse_excel_bytes
from govdash.store import SnapshotStore, StoreError, snapshot_store_from_settings
from govdash.workbook import WorkbookReadError


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def get_snapshot_store(settings: Settings = Depends(get_settings)) -> SnapshotStore:
    return snapshot_store_from_settings(settings)


app = FastAPI(title="Data Governance Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


class AdminKeyError(Exception):
    pass


def _check_admin(settings: Settings, provided: Optional[str]) -> None:
    if not settings.admin_key:
        raise AdminKeyError("writes are disabled: no admin key configured")
    if not provided or not hmac.compare_digest(provided.encode("utf-8"), settings.admin_key.encode("utf-8")):
        raise AdminKeyError("invalid admin key")


def _parse_upload(file: UploadFile, settings: Settings):
    data = file.file.read()
    logger.info("parsing upload %r (%d bytes)", file.filename, len(data))
    return parse_excel_bytes(data, scan_limit=settings.header_scan_limit)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/parse", response_model=ParseResponse)
def parse(file: UploadFile = File(...), settings: Settings = Depends(get_settings)):
    try:
        record = _parse_upload(file, settings)
    except WorkbookReadError as exc:
        logger.exception("parse failed")
        return _error(400, exc)
    return {"data": record_to_dict(record)}


@app.post("/upload", response_model=UploadResponse)
def upload(
    file: UploadFile = File(...),
    x_admin_key: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
    store: SnapshotStore = Depends(get_snapshot_store),
):
    try:
        _check_admin(settings, x_admin_key)
    except AdminKeyError as exc:
        return _error(403, exc)
    try:
        record = _parse_upload(file, settings)
    except WorkbookReadError as exc:
        logger.exception("upload parse failed")
        return _error(400, exc)
    payload = record_to_dict(record)
    try:
        store.save(record)
    except StoreError as exc:
        return {"data": payload, "saved": False, "error": str(exc)}
    return {"data": payload, "saved": True}


@app.post("/save-data", response_model=SaveDataResponse)
def save_data(
    body: SaveDataRequest,
    x_admin_key: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
    store: SnapshotStore = Depends(get_snapshot_store),
):
    try:
        _check_admin(settings, x_admin_key)
    except AdminKeyError as exc:
        return _error(403, exc)
    record = record_from_dict(body.data.model_dump(by_alias=True, exclude_none=True))
    try:
        store.save(record)
    except StoreError as exc:
        return _error(502, exc)
    return {"success": True, "message": "saved"}


@app.get("/latest-data", response_model=LatestDataResponse)
def latest_data(store: SnapshotStore = Depends(get_snapshot_store)):
    try:
        record = store.load_latest()
    except StoreError as exc:
        return _error(502, exc)
    if record is None:
        return {"status": "empty", "data": None}
    return {"status": "success", "data": record_to_dict(record)}
