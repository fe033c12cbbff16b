"""
Display labels (French UI) for enum values.

Unrecognised values, including the UNKNOWN member, render as "Inconnu"
instead of failing.
"""

from typing import Dict

UNKNOWN_LABEL = "Inconnu"
UNKNOWN_COLOR = "#6b7280"

STATUS_LABELS: Dict[str, str] = {
    "pending": "En attente",
    "in-progress": "En cours",
    "resolved": "Résolu",
    "cancelled": "Annulé",
}

DANGER_LABELS: Dict[str, str] = {
    "low": "Faible",
    "medium": "Modéré",
    "high": "Élevé",
}

# Marker colours used by the map view
DANGER_COLORS: Dict[str, str] = {
    "high": "#ef4444",
    "medium": "#eab308",
    "low": "#22c55e",
}

AVAILABILITY_LABELS: Dict[str, str] = {
    "disponible": "Disponible",
    "occupé": "Occupé",
    "en_pause": "En pause",
}

ORGANIZATION_TYPE_LABELS: Dict[str, str] = {
    "entreprise": "Entreprise",
    "association": "Association",
    "ong": "ONG",
    "gouvernemental": "Gouvernemental",
}


def _value(value) -> str:
    return getattr(value, "value", value) or ""


def status_label(status) -> str:
    return STATUS_LABELS.get(_value(status), UNKNOWN_LABEL)


def danger_label(level) -> str:
    return DANGER_LABELS.get(_value(level), UNKNOWN_LABEL)


def danger_color(level) -> str:
    return DANGER_COLORS.get(_value(level), UNKNOWN_COLOR)


def all_labels() -> Dict[str, Dict[str, str]]:
    return {
        "status": {**STATUS_LABELS, "unknown": UNKNOWN_LABEL},
        "danger_level": {**DANGER_LABELS, "unknown": UNKNOWN_LABEL},
        "availability": {**AVAILABILITY_LABELS, "unknown": UNKNOWN_LABEL},
        "organization_type": {**ORGANIZATION_TYPE_LABELS, "unknown": UNKNOWN_LABEL},
    }
