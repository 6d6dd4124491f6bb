"""Field mapping between wire values and stored columns."""

import json
from datetime import date, datetime, timezone
from typing import Any
from urllib.parse import urlsplit, urlunsplit
from zoneinfo import ZoneInfo

from app.config import settings
from app.core.errors import ValidationError

SNS_KEYS = ("youtube", "instagram", "twitter", "tiktok", "weverse", "cafe")


def site_tz() -> ZoneInfo:
    return ZoneInfo(settings.SITE_TIMEZONE)


def _parse_iso(value: str, field: str) -> date | datetime:
    text = value.strip()
    if not text:
        raise ValidationError(f"{field} must not be empty")
    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError as exc:
            raise ValidationError(f"{field} must be YYYY-MM-DD") from exc
    try:
        # fromisoformat on older interpreters rejects a trailing "Z"
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationError(f"{field} must be an ISO 8601 date or datetime") from exc


def normalize_date(value: Any, field: str = "date") -> date:
    """Return the calendar date of ``value`` as seen in the site timezone.

    Aware datetimes are converted first, so "2024-01-01T20:00:00Z" is
    2024-01-02 for a site in Asia/Seoul. Naive datetimes are taken as local.
    """
    if isinstance(value, str):
        value = _parse_iso(value, field)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(site_tz())
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"{field} must be a date")


def normalize_datetime(value: Any, field: str = "datetime") -> datetime:
    """Return ``value`` as an aware UTC datetime; naive input is site-local time."""
    if isinstance(value, str):
        value = _parse_iso(value, field)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=site_tz())
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=site_tz()).astimezone(timezone.utc)
    raise ValidationError(f"{field} must be a datetime")


def default_sns(value: dict | None) -> dict:
    """Fill every known SNS network with "" and keep any extra keys."""
    links = {key: "" for key in SNS_KEYS}
    for key, url in (value or {}).items():
        links[key] = url or ""
    return links


def parse_json_field(raw: Any, default: Any, field: str = "field") -> Any:
    """Decode a JSON form value; pass already decoded values through."""
    if raw is None or raw == "":
        return default
    if not isinstance(raw, (str, bytes)):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{field} must be valid JSON") from exc


def clean_url(url: str) -> str:
    """Drop query string and fragment (e.g. signed-URL parameters)."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
