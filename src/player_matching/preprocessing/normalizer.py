"""Text normalization for cross-source player matching.

Transfermarkt and SofaScore spell the same people and clubs differently:
accents ("Vinícius Júnior" / "Vinicius Junior"), hyphenation, club affixes
("FC Barcelona" / "Barcelona") and country naming ("Türkiye" / "Turkey").
Everything here is pure and dictionary-free except for the small alias
tables below.
"""

import re
import unicodedata

# Club tokens that carry no identity ("FC Porto" == "Porto")
CLUB_AFFIXES = frozenset(
    {
        "fc", "cf", "afc", "sc", "ac", "as", "ssc", "sv", "fk", "sk", "nk",
        "cd", "ud", "rc", "rcd", "sd", "ca", "club", "calcio", "football",
        "futbol", "de", "sl", "1", "04", "05", "1899", "1900",
    }
)

# Normalized country name -> canonical normalized name
NATIONALITY_ALIASES = {
    "turkiye": "turkey",
    "korea south": "south korea",
    "korea republic": "south korea",
    "republic of korea": "south korea",
    "cote divoire": "ivory coast",
    "usa": "united states",
    "united states of america": "united states",
    "czechia": "czech republic",
    "dr congo": "democratic republic of the congo",
    "congo dr": "democratic republic of the congo",
    "cape verde islands": "cape verde",
    "cabo verde": "cape verde",
    "bosnia herzegovina": "bosnia and herzegovina",
    "north macedonia": "macedonia",
    "eire": "ireland",
    "republic of ireland": "ireland",
}

# Position label -> line group (G, D, M, F)
POSITION_GROUPS = {
    "g": "G",
    "gk": "G",
    "goalkeeper": "G",
    "d": "D",
    "defender": "D",
    "centre-back": "D",
    "center-back": "D",
    "left-back": "D",
    "right-back": "D",
    "sweeper": "D",
    "m": "M",
    "midfield": "M",
    "midfielder": "M",
    "defensive midfield": "M",
    "central midfield": "M",
    "attacking midfield": "M",
    "left midfield": "M",
    "right midfield": "M",
    "f": "F",
    "forward": "F",
    "attack": "F",
    "centre-forward": "F",
    "center-forward": "F",
    "second striker": "F",
    "left winger": "F",
    "right winger": "F",
    "striker": "F",
}


def fold_accents(text: str) -> str:
    """Strip combining marks after NFKD decomposition ("é" -> "e")."""
    decomposed = unicodedata.normalize("NFKD", text)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    # Letters with no decomposition
    return (
        folded.replace("ß", "ss")
        .replace("ø", "o")
        .replace("Ø", "O")
        .replace("ł", "l")
        .replace("Ł", "L")
        .replace("đ", "d")
        .replace("Đ", "D")
        .replace("æ", "ae")
    )


def normalize_text(text: str | None) -> str:
    """Case-fold, accent-fold, drop punctuation and collapse whitespace.

    Hyphens and apostrophes become spaces / disappear respectively, so
    "Alexander-Arnold" and "Alexander Arnold" normalize identically, as do
    "N'Golo" and "NGolo".
    """
    if not text:
        return ""

    result = fold_accents(text).casefold()
    result = re.sub(r"['`’]", "", result)
    result = re.sub(r"[-_/.,:;()\[\]{}\"!?&+]", " ", result)
    return re.sub(r"\s+", " ", result).strip()


def normalize_name(name: str | None) -> str:
    """Normalize a player name for fuzzy comparison."""
    return normalize_text(name)


def surname_key(name: str | None) -> str:
    """Return the last token of the normalized name ("" if none)."""
    tokens = normalize_name(name).split()
    return tokens[-1] if tokens else ""


def normalize_club(club: str | None) -> str:
    """Normalize a club name and drop identity-free affixes.

    If stripping would leave nothing (e.g. a side registered as
    "Football Club"), the unstripped normalized form is returned.
    """
    normalized = normalize_text(club)
    if not normalized:
        return ""
    tokens = [t for t in normalized.split() if t not in CLUB_AFFIXES]
    return " ".join(tokens) if tokens else normalized


def normalize_nationality(nationality: str | None) -> str:
    """Normalize a country name, resolving known aliases."""
    normalized = normalize_text(nationality)
    return NATIONALITY_ALIASES.get(normalized, normalized)


def position_group(position: str | None) -> str | None:
    """Map a provider-specific position label to G/D/M/F (``None`` if unknown)."""
    if not position:
        return None
    key = fold_accents(position).casefold().strip()
    if key in POSITION_GROUPS:
        return POSITION_GROUPS[key]
    # "Defender - Centre-Back" style labels: use the most specific part
    for part in reversed(re.split(r"\s+-\s+", key)):
        if part in POSITION_GROUPS:
            return POSITION_GROUPS[part]
    return None
