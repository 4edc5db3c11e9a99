"""
Player Catalog Accessor.

Read-only view over a snapshot of player records produced by the data-fetch
subsystem. A catalog never changes after construction, so one instance can be
shared by any number of concurrent recommendation requests.
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from draft_assistant.schemas.player import Player
from draft_assistant.utils import normalize_name

logger = logging.getLogger(__name__)

# Sort key used for players without ADP data
MISSING_ADP = 999.0


@dataclass(frozen=True)
class PlayerFilters:
    """Filters accepted by query_players. All criteria are ANDed."""
    position: Optional[str] = None
    team: Optional[str] = None
    min_adp: Optional[float] = None
    max_adp: Optional[float] = None
    scoring_format: Optional[str] = None
    exclude_names: frozenset = frozenset()  # normalized names to leave out
    limit: Optional[int] = None


class PlayerCatalogProtocol(Protocol):
    """What the engine needs from a catalog."""

    def get_player_by_fuzzy_name(self, query: str) -> Optional[Player]:
        ...

    def query_players(self, filters: PlayerFilters) -> List[Player]:
        ...


def adp_sort_key(player: Player, scoring_format: Optional[str] = None) -> float:
    adp = player.adp_for(scoring_format)
    return adp if adp is not None else MISSING_ADP


class PlayerCatalog:
    """In-memory, immutable player snapshot."""

    def __init__(self, players: Iterable[Player] = ()):
        self._players: Tuple[Player, ...] = tuple(players)
        self._by_normalized_name: Dict[str, Player] = {}
        for player in self._players:
            # First record wins on name collisions, matching lookup order
            self._by_normalized_name.setdefault(normalize_name(player.name), player)

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self):
        return iter(self._players)

    @property
    def players(self) -> Tuple[Player, ...]:
        return self._players

    @classmethod
    def from_records(
        cls, records: Union[Dict[str, Dict[str, Any]], List[Dict[str, Any]]]
    ) -> "PlayerCatalog":
        """
        Build a catalog from unified player-data records.

        Accepts either an object keyed by player id or a plain list. Records
        that cannot be parsed (unknown positions such as OL or LS, missing
        names) are skipped.
        """
        if isinstance(records, dict):
            items = list(records.items())
        else:
            items = [(None, record) for record in records]

        players = []
        skipped = 0
        for player_id, record in items:
            if not isinstance(record, dict):
                skipped += 1
                continue
            try:
                player = Player.from_record(record, player_id=player_id)
            except PydanticValidationError:
                skipped += 1
                continue
            if not player.name:
                skipped += 1
                continue
            players.append(player)

        if skipped:
            logger.debug(f"Skipped {skipped} player records that are not draftable")
        logger.info(f"Loaded {len(players)} players into catalog")
        return cls(players)

    @classmethod
    def load_json(cls, path: Union[str, Path]) -> "PlayerCatalog":
        """Load the unified player-data JSON file written by the data-fetch subsystem."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_records(data)

    def get_player_by_fuzzy_name(self, query: str) -> Optional[Player]:
        """
        Find a player by name.

        An exact normalized match wins; otherwise the first player whose
        normalized name contains the normalized query is returned.
        """
        norm_query = normalize_name(query)
        if not norm_query:
            return None

        exact = self._by_normalized_name.get(norm_query)
        if exact:
            return exact

        for player in self._players:
            if norm_query in normalize_name(player.name):
                return player
        return None

    def query_players(self, filters: PlayerFilters) -> List[Player]:
        """Filter the snapshot and return players sorted by ADP (missing ADP last)."""
        fmt = filters.scoring_format
        position = filters.position.upper() if filters.position else None
        team = filters.team.upper() if filters.team else None

        results = []
        for player in self._players:
            if position and player.position.value != position:
                continue
            if team and player.team != team:
                continue
            if filters.exclude_names and normalize_name(player.name) in filters.exclude_names:
                continue
            adp = player.adp_for(fmt)
            if filters.min_adp is not None and (adp is None or adp < filters.min_adp):
                continue
            if filters.max_adp is not None and (adp is None or adp > filters.max_adp):
                continue
            results.append(player)

        results.sort(key=lambda p: adp_sort_key(p, fmt))
        if filters.limit is not None:
            results = results[:filters.limit]
        return results
