"""Jinja filters and date formatting helpers."""
from datetime import datetime, timezone

import pytz

DEFAULT_TZ = "America/Sao_Paulo"


def fmt_iso_local(value, tz_name: str = DEFAULT_TZ, use_12h: bool = False) -> str:
    """
    Format a date/datetime string into local time.
    Supports:
      - 'YYYY-MM-DD'
      - 'YYYY-MM-DDTHH:MM:SS' (optionally with 'Z' or an offset like '+00:00')
    On parse error, returns the original value (so the UI never goes blank).
    """
    if value is None:
        return ""

    s = str(value).strip()
    if not s:
        return ""

    if len(s) == 10:
        try:
            return datetime.strptime(s, "%Y-%m-%d").strftime("%d/%m/%Y")
        except ValueError:
            return s

    try:
        dt = datetime.fromisoformat(s.replace("T", " ").replace("Z", "+00:00"))
    except ValueError:
        return s

    # Naive timestamps from the backend are UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    try:
        local = dt.astimezone(pytz.timezone(tz_name))
    except pytz.UnknownTimeZoneError:
        local = dt

    if use_12h:
        hh = local.strftime("%I").lstrip("0") or "0"
        return f"{local.strftime('%d %b %Y')}, {hh}:{local.strftime('%M %p')}"
    return local.strftime("%d/%m/%Y %H:%M")


def fmt_currency(value) -> str:
    """Brazilian real with '.' thousands and ',' decimals, e.g. R$ 1.234,50."""
    try:
        amount = float(value or 0)
    except (TypeError, ValueError):
        return str(value)
    text = f"{amount:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"
