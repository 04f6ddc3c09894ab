"""Field extraction helpers for product label text."""
from .expiry_date import ParsedDate, extract_expiration_date, select_best_candidate

__all__ = ["ParsedDate", "extract_expiration_date", "select_best_candidate"]
