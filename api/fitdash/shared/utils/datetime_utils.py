"""
Utilidades para manejo de fechas y horas.

Todas las fechas internas son `datetime` con zona horaria. Los valores
naive que llegan de la BD o de JSON se interpretan como UTC.
"""
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger


_MONTHS_SHORT = ["ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sep", "oct", "nov", "dic"]
_WEEKDAYS_SHORT = ["lun", "mar", "mié", "jue", "vie", "sáb", "dom"]
_MONTHS_LONG = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]
_WEEKDAYS_LONG = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]

# (limite en segundos, tamano de la unidad en segundos, singular, plural)
_RELATIVE_UNITS = [
    (60, 1, "segundo", "segundos"),
    (3600, 60, "minuto", "minutos"),
    (86400, 3600, "hora", "horas"),
    (604800, 86400, "día", "días"),
    (2629746, 604800, "semana", "semanas"),
    (31556952, 2629746, "mes", "meses"),
    (float("inf"), 31556952, "año", "años"),
]


class DateTimeUtils:
    """Clase de utilidades para operaciones con fechas y horas."""

    @staticmethod
    def now_utc() -> datetime:
        """
        Obtiene la fecha y hora actual en UTC.

        Returns:
            datetime: Fecha y hora actual en UTC
        """
        return datetime.now(timezone.utc)

    @staticmethod
    def to_iso_string(dt: Optional[datetime]) -> Optional[str]:
        """
        Convierte un datetime a string ISO 8601 (None se mantiene).
        """
        if dt is None:
            return None
        return DateTimeUtils.ensure_aware(dt).isoformat()

    @staticmethod
    def from_iso_string(iso_string: str) -> Optional[datetime]:
        """
        Convierte un string ISO 8601 a datetime.

        Args:
            iso_string: String en formato ISO 8601 (acepta sufijo 'Z')

        Returns:
            Optional[datetime]: Objeto datetime o None si hay error
        """
        try:
            return datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
        except (ValueError, TypeError, AttributeError):
            return None

    @staticmethod
    def ensure_aware(dt: datetime) -> datetime:
        """Asume UTC para datetimes naive."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt

    @staticmethod
    def parse(value: Any) -> Optional[datetime]:
        """
        Convierte str/date/datetime a datetime con zona horaria.
        Valores vacios o invalidos devuelven None (nunca lanza).
        """
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return DateTimeUtils.ensure_aware(value)
        if isinstance(value, date):
            return datetime.combine(value, time.min, tzinfo=timezone.utc)
        if isinstance(value, str):
            parsed = DateTimeUtils.from_iso_string(value.strip())
            return DateTimeUtils.ensure_aware(parsed) if parsed else None
        return None

    @staticmethod
    def start_of_day(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
        """Inicio del dia (00:00) en la zona indicada."""
        local = dt.astimezone(tz) if tz else dt
        return local.replace(hour=0, minute=0, second=0, microsecond=0)

    @staticmethod
    def end_of_day(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
        """Fin del dia (23:59:59.999999) en la zona indicada."""
        return DateTimeUtils.start_of_day(dt, tz) + timedelta(days=1) - timedelta(microseconds=1)

    @staticmethod
    def start_of_week(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
        """Lunes 00:00 de la semana de `dt`."""
        day_start = DateTimeUtils.start_of_day(dt, tz)
        return day_start - timedelta(days=day_start.weekday())

    @staticmethod
    def iso_day(dt: datetime, tz: Optional[tzinfo] = None) -> str:
        """Clave de dia YYYY-MM-DD en la zona indicada."""
        local = dt.astimezone(tz) if tz else dt
        return local.date().isoformat()

    @staticmethod
    def calendar_days_between(later: datetime, earlier: datetime, tz: Optional[tzinfo] = None) -> int:
        """Diferencia en dias de calendario (no en bloques de 24h)."""
        a = later.astimezone(tz).date() if tz else later.date()
        b = earlier.astimezone(tz).date() if tz else earlier.date()
        return (a - b).days

    @staticmethod
    def day_label(dt: datetime, tz: Optional[tzinfo] = None) -> str:
        """Etiqueta corta de dia: '05 mar'."""
        local = dt.astimezone(tz) if tz else dt
        return f"{local.day:02d} {_MONTHS_SHORT[local.month - 1]}"

    @staticmethod
    def weekday_label(dt: datetime, tz: Optional[tzinfo] = None) -> str:
        """Etiqueta con dia de semana: 'lun, 05 mar'."""
        local = dt.astimezone(tz) if tz else dt
        return f"{_WEEKDAYS_SHORT[local.weekday()]}, {DateTimeUtils.day_label(local)}"

    @staticmethod
    def long_date_label(dt: datetime, tz: Optional[tzinfo] = None) -> str:
        """Etiqueta larga: 'lunes, 05 de marzo'."""
        local = dt.astimezone(tz) if tz else dt
        return f"{_WEEKDAYS_LONG[local.weekday()]}, {local.day:02d} de {_MONTHS_LONG[local.month - 1]}"

    @staticmethod
    def time_label(dt: Optional[datetime], tz: Optional[tzinfo] = None) -> str:
        """Hora HH:MM o '—' si no hay fecha."""
        if dt is None:
            return "—"
        local = dt.astimezone(tz) if tz else dt
        return local.strftime("%H:%M")

    @staticmethod
    def relative_label(value: Any, now: datetime, fallback: str = "—") -> str:
        """
        Texto relativo respecto a `now`: 'hace 3 días', 'en 2 horas'.
        """
        dt = DateTimeUtils.parse(value)
        if dt is None:
            return fallback
        diff = (dt - now).total_seconds()
        absolute = abs(diff)
        if absolute < 1:
            return "ahora"
        for limit, size, singular, plural in _RELATIVE_UNITS:
            if absolute < limit:
                amount = max(1, round(absolute / size))
                unit = singular if amount == 1 else plural
                return f"en {amount} {unit}" if diff > 0 else f"hace {amount} {unit}"
        return fallback


def resolve_timezone(name: Optional[str], default: str = "UTC") -> tzinfo:
    """
    Resuelve un nombre IANA (cookie `tz`/`fp_tz`) a tzinfo.
    Nombres invalidos caen al valor por defecto.
    """
    for candidate in (name, default):
        if not candidate:
            continue
        try:
            return ZoneInfo(candidate.strip())
        except (ZoneInfoNotFoundError, ValueError, OSError):
            logger.debug(f"Zona horaria invalida ignorada: {candidate!r}")
    return timezone.utc
