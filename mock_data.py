"""Static player lists served whenever live region data is unavailable"""
from typing import Dict, List

from models import PlayerRecord

MOCK_PLAYERS: Dict[str, List[PlayerRecord]] = {
    "US1": [
        PlayerRecord(name="P-B | JamstarOG", id="usr-123456", ping=45),
        PlayerRecord(name="P-B | TheFrup!OG", id="usr-234567", ping=32),
    ],
    "US2": [
        PlayerRecord(name="P-B | DEVIN", id="usr-345678", ping=28),
        PlayerRecord(name="P-B | ShivanshST89", id="usr-456789", ping=53),
    ],
    "EU1": [
        PlayerRecord(name="P-B | mikamo", id="usr-567890", ping=37),
        PlayerRecord(name="P-B | WolficekOG", id="usr-678901", ping=41),
    ],
    "EU2": [
        PlayerRecord(name="P-B | Artjom471", id="usr-789012", ping=39),
        PlayerRecord(name="P-B | \U0001F4A6Slim Shady\U0001F4A6", id="usr-890123", ping=47),
    ],
    "SEA": [
        PlayerRecord(name="P-B | Shafat", id="usr-901234", ping=40),
        PlayerRecord(name="P-B | Ishu73", id="usr-912345", ping=36),
    ],
}

def mock_players(region_id: str) -> List[PlayerRecord]:
    """Mock players for a region, empty for regions without seed data"""
    return list(MOCK_PLAYERS.get(region_id, []))
