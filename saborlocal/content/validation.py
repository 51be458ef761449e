from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlparse

_SPANISH_INTL = re.compile(r"^\+34([679]\d{2})(\d{3})(\d{3})$")
_SPANISH_NATIONAL = re.compile(r"^([6789]\d{2})(\d{3})(\d{3})$")
_INTERNATIONAL = re.compile(r"^\+\d{1,3}\d{6,14}$")
_PHONE_NOISE = re.compile(r"[\s\-()]")


@dataclass(frozen=True)
class PhoneValidation:
    is_valid: bool
    formatted: str | None = None
    error: str | None = None


def _clean_phone(phone: str) -> str:
    return _PHONE_NOISE.sub("", phone)


def validate_spanish_phone(phone: str) -> PhoneValidation:
    if not phone.strip():
        return PhoneValidation(True)
    cleaned = _clean_phone(phone)
    match = _SPANISH_INTL.match(cleaned)
    if match:
        return PhoneValidation(True, formatted="+34 " + " ".join(match.groups()))
    match = _SPANISH_NATIONAL.match(cleaned)
    if match:
        return PhoneValidation(True, formatted=" ".join(match.groups()))
    return PhoneValidation(
        False,
        error="Formato de teléfono español no válido. Use +34 XXX XXX XXX o 9XX XXX XXX",
    )


def validate_international_phone(phone: str) -> PhoneValidation:
    if not phone.strip():
        return PhoneValidation(True)
    if _INTERNATIONAL.match(_clean_phone(phone)):
        # International numbers keep the caller's formatting
        return PhoneValidation(True, formatted=phone)
    return PhoneValidation(
        False,
        error="Formato de teléfono internacional no válido. Use +XX XXX XXX XXX",
    )


def validate_phone(phone: str) -> PhoneValidation:
    """Accept Spanish numbers first, then any international ``+`` number. Empty is valid."""
    if not phone.strip():
        return PhoneValidation(True)
    for check in (validate_spanish_phone, validate_international_phone):
        result = check(phone)
        if result.is_valid:
            return result
    return PhoneValidation(
        False,
        error=(
            "Formato de teléfono no válido. Use +34 XXX XXX XXX (España) "
            "o +XX XXX XXX XXX (internacional)"
        ),
    )


def is_valid_url(url: str | None) -> bool:
    if not url or not url.strip():
        return True
    parsed = urlparse(url.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def url_error_message(url: str | None) -> str:
    if not url or not url.strip():
        return ""
    if "." in url and not url.startswith(("http://", "https://")):
        return "La URL debe comenzar con http:// o https://"
    return "Por favor, introduce una URL válida (ej: https://www.ejemplo.com)"
