"""
Exportacion de una sesion de entreno a iCalendar (.ics).
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fitdash.domain.entities.dashboard_sources import SessionRecord
from fitdash.shared.utils.datetime_utils import DateTimeUtils


PRODID = "-//Fitness Pro//Agenda//ES"
UID_DOMAIN = "fitness-pro.local"


def format_ics_date(dt: datetime) -> str:
    """Fecha UTC en formato basico: 20250305T093000Z."""
    return DateTimeUtils.ensure_aware(dt).astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def sanitize(text: Optional[str]) -> str:
    if not text:
        return ""
    return "\\n".join(part for part in str(text).replace("\r", "\n").split("\n") if part)


def build_session_ics(
    session: SessionRecord,
    trainer_name: Optional[str] = None,
    trainer_email: Optional[str] = None,
    client_name: Optional[str] = None,
    now: Optional[datetime] = None,
    title: Optional[str] = None,
    notes: Optional[str] = None,
) -> str:
    """
    Genera el contenido ICS de una sesion (lineas separadas por CRLF).

    Raises:
        ValueError: Si la sesion no tiene fecha de inicio
    """
    start = DateTimeUtils.parse(session.scheduled_at)
    if start is None:
        raise ValueError("La sesión no tiene fecha")

    duration = session.duration_min if session.duration_min and session.duration_min > 0 else 60
    end = start + timedelta(minutes=duration)
    stamp = now or DateTimeUtils.now_utc()

    if title:
        summary = sanitize(title)
    elif trainer_name:
        summary = f"Sesión con {sanitize(trainer_name)}"
    else:
        summary = "Sesión de entrenamiento"

    description = [
        f"Entrenador: {sanitize(trainer_name)}" if trainer_name else None,
        f"Email del entrenador: {trainer_email}" if trainer_email else None,
        f"Cliente: {sanitize(client_name)}" if client_name else None,
        f"Notas: {sanitize(notes)}" if notes else None,
    ]
    description = [part for part in description if part]

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "BEGIN:VEVENT",
        f"UID:session-{session.id}@{UID_DOMAIN}",
        f"DTSTAMP:{format_ics_date(stamp)}",
        f"DTSTART:{format_ics_date(start)}",
        f"DTEND:{format_ics_date(end)}",
        f"SUMMARY:{summary}",
        f"LOCATION:{sanitize(session.location)}",
        "DESCRIPTION:" + "\\n".join(description),
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines)
