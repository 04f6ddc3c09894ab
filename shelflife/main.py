"""FastAPI router definitions for the expiry extraction service."""
from __future__ import annotations

import datetime as dt
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, status
from pydantic import BaseModel

from . import ocr_extract
from .dates import (
    StoredDateError,
    days_until,
    format_date_for_display,
    format_date_for_storage,
    item_status,
    local_today,
    parse_stored_date,
)
from .ocr_extract import OCRDecodeError
from .settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Shelflife Expiry Extraction Service")


class ExtractRequest(BaseModel):
    text: Optional[str] = None
    blocks: Optional[List[str]] = None
    today: Optional[dt.date] = None


class ExtractedDate(BaseModel):
    date: str
    display: str
    confidence: str
    raw_match: str
    days_until: int
    status: str


class ExtractResponse(BaseModel):
    text: str
    extracted_date: Optional[ExtractedDate] = None


class StatusRequest(BaseModel):
    expiration_date: str
    today: Optional[dt.date] = None


class StatusResponse(BaseModel):
    expiration_date: str
    display: str
    days_until: int
    status: str


def _resolve_today(requested: Optional[dt.date], settings: Settings) -> dt.date:
    if requested is not None:
        return requested
    return local_today(settings.timezone)


def _ocr_payload(payload: ExtractRequest, settings: Settings) -> ocr_extract.OCRInput:
    if payload.blocks is not None:
        source: ocr_extract.OCRInput = payload.blocks
        size = sum(len(block) for block in payload.blocks)
    elif payload.text is not None:
        source = payload.text
        size = len(payload.text)
    else:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="missing_text")

    if size > settings.max_text_length:
        LOGGER.warning("Rejecting OCR text of %d characters (limit %d)", size, settings.max_text_length)
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="text_too_long")
    return source


@app.post("/extract", response_model=ExtractResponse)
async def extract(payload: ExtractRequest, settings: Settings = Depends(get_settings)) -> ExtractResponse:
    source = _ocr_payload(payload, settings)
    today = _resolve_today(payload.today, settings)

    try:
        result = ocr_extract.recognise_text(source, today=today)
    except OCRDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="ocr_decode_failed") from exc

    parsed = result.extracted_date
    if parsed is None:
        LOGGER.info("No expiration date found in %d characters of OCR text", len(result.text))
        return ExtractResponse(text=result.text)

    stored = format_date_for_storage(parsed.date)
    LOGGER.info("Extracted expiration date %s (%s) from %r", stored, parsed.confidence, parsed.raw_match)
    return ExtractResponse(
        text=result.text,
        extracted_date=ExtractedDate(
            date=stored,
            display=format_date_for_display(stored),
            confidence=parsed.confidence,
            raw_match=parsed.raw_match,
            days_until=days_until(parsed.date, today),
            status=item_status(parsed.date, today, settings.soon_threshold_days),
        ),
    )


@app.post("/status", response_model=StatusResponse)
async def expiry_status(payload: StatusRequest, settings: Settings = Depends(get_settings)) -> StatusResponse:
    try:
        expiry = parse_stored_date(payload.expiration_date)
    except StoredDateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_expiration_date") from exc

    today = _resolve_today(payload.today, settings)
    stored = format_date_for_storage(expiry)
    return StatusResponse(
        expiration_date=stored,
        display=format_date_for_display(stored),
        days_until=days_until(expiry, today),
        status=item_status(expiry, today, settings.soon_threshold_days),
    )


__all__ = ["app"]
