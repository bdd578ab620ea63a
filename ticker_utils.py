"""
Ticker Utility Module
Centralized emiten-code cleaning for consistent handling across watchlist, client and store.
"""
from typing import Iterable, List

from config import ALLOWED_TICKER_CHARS, EXCHANGE_SUFFIXES, MAX_TICKER_LENGTH, MASKED_CREDENTIAL_LENGTH


def clean_ticker(ticker: str) -> str:
    """
    Clean an emiten code: strip whitespace, uppercase, drop exchange suffix.

    Examples:
        >>> clean_ticker(" bbri ")
        'BBRI'
        >>> clean_ticker("GOTO.JK")
        'GOTO'
    """
    if not ticker:
        return ""
    code = str(ticker).strip().upper()
    for suffix in EXCHANGE_SUFFIXES:
        if code.endswith(suffix):
            code = code[: -len(suffix)]
    return code


def is_valid_ticker(ticker: str) -> bool:
    """True for a non-empty cleaned code made of allowed characters and within length limit."""
    if not ticker or len(ticker) > MAX_TICKER_LENGTH:
        return False
    return all(ch in ALLOWED_TICKER_CHARS for ch in ticker)


def unique_tickers(tickers: Iterable[str]) -> List[str]:
    """Clean, drop invalid and de-duplicate, order preserved."""
    seen = set()
    out: List[str] = []
    for t in tickers:
        code = clean_ticker(t)
        if not is_valid_ticker(code) or code in seen:
            continue
        seen.add(code)
        out.append(code)
    return out


def mask_credential(value: str) -> str:
    """Mask a secret for logging, keeping the last MASKED_CREDENTIAL_LENGTH characters."""
    if not value or len(value) <= MASKED_CREDENTIAL_LENGTH:
        return "****"
    return "*" * (len(value) - MASKED_CREDENTIAL_LENGTH) + value[-MASKED_CREDENTIAL_LENGTH:]
