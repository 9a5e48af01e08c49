def _clamp(value):
    try:
        value = int(value or 0)
    except (TypeError, ValueError):
        return 0
    return value if value > 0 else 0


def parse_credits(credits):
    """Return a clamped ``(hours, minutes)`` pair from a ``{hours, minutes}`` mapping."""
    credits = credits or {}
    return _clamp(credits.get('hours')), _clamp(credits.get('minutes'))


def format_credits(hours, minutes):
    hours, minutes = _clamp(hours), _clamp(minutes)
    if hours > 0 and minutes > 0:
        return f"{hours}h {minutes}m"
    elif hours > 0:
        return f"{hours}h"
    elif minutes > 0:
        return f"{minutes}m"
    return "0h 0m"


def status_tier(hours, minutes):
    # Los límites son estrictos: 120 minutos exactos es "Good", 60 es "Low"
    total_minutes = _clamp(hours) * 60 + _clamp(minutes)
    if total_minutes > 120:
        return "Excellent"
    if total_minutes > 60:
        return "Good"
    return "Low"
