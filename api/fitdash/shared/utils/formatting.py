"""
Formateo de numeros para etiquetas de los dashboards (estilo europeo:
separador de miles '.', decimal ',').
"""
from typing import Optional


def _european(text: str) -> str:
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_number(value: Optional[float], decimals: int = 0) -> str:
    """1234.5 -> '1.235' (decimals=0) o '1.234,5' (decimals=1)."""
    if value is None:
        return "0"
    formatted = f"{value:,.{decimals}f}"
    if decimals and "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".")
    return _european(formatted)


def format_currency(value: Optional[float], currency: str = "EUR") -> str:
    """12.5 -> '12,50 €'."""
    amount = _european(f"{(value or 0):,.2f}")
    symbol = "€" if currency.upper() == "EUR" else currency.upper()
    return f"{amount} {symbol}"


def format_percent(ratio: Optional[float], decimals: int = 1) -> str:
    """0.256 -> '25,6%'. Valores nulos o negativos -> '0%'."""
    if ratio is None or ratio <= 0:
        return "0%"
    return f"{format_number(ratio * 100, decimals)}%"


def format_signed(value: float, decimals: int = 1, unit: str = "") -> str:
    """+1,5 kg / −0,8 kg (signo menos tipografico)."""
    sign = "+" if value > 0 else "−"
    suffix = f" {unit}" if unit else ""
    return f"{sign}{format_number(abs(value), decimals)}{suffix}"


def format_duration_minutes(minutes: Optional[float]) -> str:
    """95 -> '1h 35m'; 0.5 -> '30s'; None -> '—'."""
    if minutes is None:
        return "—"
    absolute = max(0.0, minutes)
    hours = int(absolute // 60)
    mins = round(absolute % 60)
    if hours >= 1:
        return f"{hours}h" if mins == 0 else f"{hours}h {mins}m"
    if mins >= 1:
        return f"{mins}m"
    return f"{round(absolute * 60)}s"


def format_fixed(value: float, decimals: int = 2) -> str:
    """99.5 -> '99,50' (sin recortar ceros)."""
    return _european(f"{value:,.{decimals}f}")
