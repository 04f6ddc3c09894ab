"""Label OCR helpers.

Text recognition runs on the client device; this module receives whatever the
OCR engine produced (a single string, UTF-8 bytes, or the list of recognised
text blocks), cleans it up, and looks for the expiration date printed on the
label.
"""
from __future__ import annotations

import datetime as dt
import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

import jaconv

from .field_extractors import ParsedDate, extract_expiration_date

LOGGER = logging.getLogger(__name__)

OCRInput = Union[str, bytes, Iterable[str]]


class OCRDecodeError(RuntimeError):
    """Raised when OCR output cannot be interpreted."""


@dataclass(frozen=True)
class OCRResult:
    text: str
    extracted_date: Optional[ParsedDate]


def recognise_text(ocr_output: OCRInput, *, today: Optional[dt.date] = None) -> OCRResult:
    """Normalise ``ocr_output`` and extract the label's expiration date.

    Parameters
    ----------
    ocr_output:
        The raw OCR string, its UTF-8 encoding, or an iterable of text blocks
        in reading order.  Blocks are joined with newlines.
    today:
        Calendar day used to tell upcoming dates from expired ones.  Defaults
        to the current local day.
    """

    raw_text = _load_text(ocr_output)
    text = "\n".join(_normalise_lines(raw_text))
    extracted = extract_expiration_date(text, today=today)
    if extracted is None:
        LOGGER.debug("no_expiry_date_found: lines=%d", text.count("\n") + 1 if text else 0)
    else:
        LOGGER.debug(
            "expiry_date_found: date=%s confidence=%s raw=%r",
            extracted.date.isoformat(),
            extracted.confidence,
            extracted.raw_match,
        )
    return OCRResult(text=text, extracted_date=extracted)


def _load_text(ocr_output: OCRInput) -> str:
    if isinstance(ocr_output, str):
        return ocr_output

    if isinstance(ocr_output, (bytes, bytearray)):
        try:
            return bytes(ocr_output).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise OCRDecodeError("invalid_utf8") from exc

    if isinstance(ocr_output, Iterable):
        blocks: List[str] = []
        for block in ocr_output:
            if not isinstance(block, str):
                raise OCRDecodeError("unsupported_block_type")
            blocks.append(block)
        return "\n".join(blocks)

    raise OCRDecodeError("unsupported_input_type")


def _normalise_text(text: str) -> str:
    cleaned = unicodedata.normalize("NFKC", text or "")
    cleaned = jaconv.z2h(cleaned, kana=False, digit=True, ascii=True)
    cleaned = cleaned.replace("\u3000", " ")
    cleaned = re.sub(r"[\t\f\r\v]+", " ", cleaned)
    cleaned = re.sub(r"\s{2,}", " ", cleaned)
    return cleaned.strip()


def _normalise_lines(raw_text: str) -> List[str]:
    return [line for line in (_normalise_text(line) for line in raw_text.splitlines()) if line]


__all__ = [
    "OCRDecodeError",
    "OCRResult",
    "recognise_text",
]
