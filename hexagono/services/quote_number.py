# hexagono/services/quote_number.py
"""
Números de cotización y tokens de seguimiento.

Formato del número: COT-YYYYMMDD-NNNN (ej. COT-20241221-0001).
El token es un string de 32 caracteres [A-Za-z0-9] generado con `secrets`.
"""
from __future__ import annotations

import re
import secrets
import string
import time
from datetime import date, datetime
from typing import Optional

PREFIX = "COT"
SEQUENCE_MODULO = 10000
TOKEN_LENGTH = 32
TOKEN_ALPHABET = string.ascii_letters + string.digits

# [0-9] explícito: \d en Python también acepta dígitos unicode
QUOTE_NUMBER_RE = re.compile(r"COT-([0-9]{8})-([0-9]{4})")
ACCESS_TOKEN_RE = re.compile(r"[A-Za-z0-9]{32}")


def _auto_sequence(now: datetime) -> int:
    # mezcla de tiempo sub-segundo + CSPRNG; la unicidad real la garantiza la DB
    sub_second = (now.microsecond // 1000) * 10 + (time.perf_counter_ns() // 1000) % 1000
    return (sub_second + secrets.randbelow(SEQUENCE_MODULO)) % SEQUENCE_MODULO


def generate_quote_number(
    sequence: Optional[int] = None, *, now: Optional[datetime] = None
) -> str:
    """
    Genera un número COT-YYYYMMDD-NNNN con la fecha local actual.

    - `sequence` dado: se usa siempre (también 0) y se envuelve módulo 10000
    - `sequence` negativo: ValueError
    - sin `sequence`: secuencia automática (best-effort, no garantiza unicidad)
    """
    now = now or datetime.now()
    if sequence is None:
        seq = _auto_sequence(now)
    else:
        if sequence < 0:
            raise ValueError("sequence must be >= 0")
        seq = sequence % SEQUENCE_MODULO
    return f"{PREFIX}-{now:%Y%m%d}-{seq:04d}"


def is_valid_quote_number(value) -> bool:
    return isinstance(value, str) and QUOTE_NUMBER_RE.fullmatch(value) is not None


def extract_date_from_quote_number(value) -> Optional[date]:
    """None si el formato es inválido o la fecha no existe (ej. 20241332)."""
    if not is_valid_quote_number(value):
        return None
    raw = QUOTE_NUMBER_RE.fullmatch(value).group(1)
    try:
        return datetime.strptime(raw, "%Y%m%d").date()
    except ValueError:
        return None


def extract_sequence_from_quote_number(value) -> Optional[int]:
    if not is_valid_quote_number(value):
        return None
    return int(QUOTE_NUMBER_RE.fullmatch(value).group(2))


def generate_access_token() -> str:
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))


def is_valid_access_token(value) -> bool:
    return isinstance(value, str) and ACCESS_TOKEN_RE.fullmatch(value) is not None
