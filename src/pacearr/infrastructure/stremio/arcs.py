"""Episode-key prefix -> story arc name."""

from __future__ import annotations

from types import MappingProxyType

ARC_NAMES = MappingProxyType(
    {
        "RO": "Romance Dawn",
        "OR": "Orange Town",
        "SY": "Syrup Village",
        "GA": "Gaimon",
        "BA": "Baratie",
        "AP": "Arlong Park",
        "REV": "Reverse Mountain",
        "WP": "Whisky Peak",
        "LG": "Little Garden",
        "AR": "Arabasta",
        "JA": "Jaya",
        "SK": "Skypeia",
        "LRLL": "Long Ring Long Land",
        "WA": "Water 7",
        "EL": "Enies Lobby",
        "EN": "Enies Lobby",
        "TB": "Thriller Bark",
        "SAB": "Sabaody Archipelago",
        "AM": "Amazon Lily",
        "ID": "Impel Down",
        "MW": "Marineford",
        "FI": "Fish-Man Island",
        "PH": "Punk Hazard",
        "DR": "Dressrosa",
        "ZO": "Zou",
        "WC": "Whole Cake Island",
        "WS": "Wano",
    }
)


def arc_name(episode_id: str) -> str:
    """Arc name for an episode key such as ``RO_1``; unknown prefixes pass through."""
    prefix = episode_id.split("_", 1)[0]
    return ARC_NAMES.get(prefix, prefix)
