"""Blocking key generation for candidate pair reduction.

Players that share no blocking key are never compared.  Two key families
are produced:

- ``dob|<iso date>``: exact birth date, which pairs players whose surname
  is spelled differently by the two providers.
- ``sn|<surname>``: normalized last name token, which pairs players whose
  birth date is missing or has day and month swapped on one side.
"""

from datetime import date

from player_matching.preprocessing.normalizer import surname_key


def coerce_date(value: date | str | None) -> date | None:
    """Accept ``date`` objects or ISO strings; anything unparsable is ``None``."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def generate_blocking_keys(player: dict) -> list[str]:
    """Return the sorted blocking keys for a player dict.

    Args:
        player: Dict with ``"name"`` and optionally ``"date_of_birth"``.
    """
    keys: set[str] = set()
    dob = coerce_date(player.get("date_of_birth"))
    surname = surname_key(player.get("name"))

    if dob is not None:
        keys.add(f"dob|{dob.isoformat()}")
    if surname:
        keys.add(f"sn|{surname}")

    return sorted(keys)
