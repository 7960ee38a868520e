from player_matching.models.audit_log import AuditLog
from player_matching.models.base import Base
from player_matching.models.config_settings import ConfigSettings
from player_matching.models.match_candidate import MatchCandidate
from player_matching.models.review_queue_entry import ReviewQueueEntry
from player_matching.models.sofascore_player import SofascorePlayer
from player_matching.models.transfermarkt_club import TransfermarktClub
from player_matching.models.transfermarkt_player import TransfermarktPlayer

__all__ = [
    "AuditLog",
    "Base",
    "ConfigSettings",
    "MatchCandidate",
    "ReviewQueueEntry",
    "SofascorePlayer",
    "TransfermarktClub",
    "TransfermarktPlayer",
]
