"""Expiration date extraction for product label OCR text."""
