"""
Data fetchers for item catalogs and market history.
"""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional

import requests
import yaml

from .config import Config
from .exceptions import CatalogError
from .models import CatalogEntry

logger = logging.getLogger(__name__)


# Used when the SDE types file is not available
EVE_FALLBACK_ITEMS = [
    (34, 'Tritanium'),
    (35, 'Pyerite'),
    (36, 'Mexallon'),
    (37, 'Isogen'),
    (38, 'Nocxium'),
    (39, 'Zydrine'),
    (40, 'Megacyte'),
    (44, 'Enriched Uranium'),
    (11399, 'Morphite'),
    (16275, 'Oxygen Isotopes'),
    (16274, 'Nitrogen Isotopes'),
    (16273, 'Hydrogen Isotopes'),
    (16272, 'Helium Isotopes'),
    (213, 'Shuttle'),
    (588, 'Destroyer'),
    (29668, 'PLEX'),
    (44992, 'Skill Injector'),
    (40520, 'Daily Alpha Injector'),
    (3645, 'Magnetic Field Stabilizer II'),
    (1952, 'Damage Control II'),
    (5973, 'Heat Sink II'),
    (2048, 'Ballistic Control System II'),
    (11370, 'Twinkey'),
    (34133, 'Quafe Zero'),
]


class MarketFetcher(ABC):
    """Shared HTTP plumbing for market APIs."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        user_agent: Optional[str] = None,
        timeout: float = Config.REQUEST_TIMEOUT
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers = {
            'Accept': 'application/json',
            'User-Agent': user_agent or Config.USER_AGENT,
        }

    def _get_json(self, url: str, params: Optional[dict] = None, headers: Optional[dict] = None) -> Any:
        response = self.session.get(
            url,
            params=params,
            headers={**self.headers, **(headers or {})},
            timeout=self.timeout
        )
        response.raise_for_status()
        return response.json()

    def _fetch_or_none(self, what: str, url: str, **kwargs) -> Any:
        """GET a JSON payload; None on any network, HTTP or decoding failure."""
        try:
            return self._get_json(url, **kwargs)
        except requests.HTTPError as e:
            logger.warning(f"{what}: HTTP {e.response.status_code if e.response is not None else '?'}")
        except requests.RequestException as e:
            logger.warning(f"{what}: request failed: {e}")
        except ValueError as e:
            logger.warning(f"{what}: malformed JSON: {e}")
        return None

    @abstractmethod
    def load_catalog(self) -> List[CatalogEntry]:
        """All tradeable items of the market."""

    @abstractmethod
    def fetch_history(self, item_id) -> Any:
        """Raw daily history for one item, or None."""


class OSRSFetcher(MarketFetcher):
    """Old School RuneScape: item dump catalog and Grand Exchange graph history."""

    def __init__(
        self,
        item_dump_url: str = Config.OSRS_ITEM_DUMP_URL,
        graph_url: str = Config.OSRS_GRAPH_URL,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.item_dump_url = item_dump_url
        self.graph_url = graph_url

    def load_catalog(self) -> List[CatalogEntry]:
        """Fetch the item database; raises CatalogError when it is unreachable."""
        logger.info("Fetching OSRS item database...")
        try:
            data = self._get_json(self.item_dump_url)
        except (requests.RequestException, ValueError) as e:
            raise CatalogError(f"Failed to fetch OSRS item database: {e}") from e

        if not isinstance(data, dict):
            raise CatalogError("OSRS item database has an unexpected shape")

        entries = self.parse_catalog(data)
        logger.info(f"[SUCCESS] Item database loaded: {len(entries):,} items")
        return entries

    @staticmethod
    def parse_catalog(data: dict) -> List[CatalogEntry]:
        """Convert the raw item dump into catalog entries; skips non-item keys."""
        entries = []
        for key, item in data.items():
            if not isinstance(item, dict):
                continue
            try:
                item_id = int(key)
            except (TypeError, ValueError):
                # The dump carries metadata keys such as '%LAST_UPDATE%'
                continue
            limit = item.get('limit')
            entries.append(CatalogEntry(
                id=item_id,
                name=item.get('name'),
                daily_volume=item.get('volume'),
                unit_limit=int(limit) if isinstance(limit, (int, float)) else None,
                members=item.get('members') is not False,
                price_hint=item.get('price'),
            ))
        return entries

    def fetch_history(self, item_id) -> Optional[dict]:
        """Daily price map for an item, or None."""
        data = self._fetch_or_none(
            f"OSRS item {item_id}",
            self.graph_url.format(item_id=item_id)
        )
        if not isinstance(data, dict):
            return None
        return data.get('daily') or None


class EVEFetcher(MarketFetcher):
    """EVE Online: SDE type catalog and ESI regional market history."""

    def __init__(
        self,
        region_id: int = Config.EVE_REGION_ID,
        types_file: Optional[Path] = None,
        history_url: str = Config.EVE_HISTORY_URL,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.region_id = region_id
        self.types_file = Path(types_file) if types_file else Config.EVE_TYPES_FILE
        self.history_url = history_url
        self.headers['X-Compatibility-Date'] = Config.EVE_COMPATIBILITY_DATE

    def load_catalog(self) -> List[CatalogEntry]:
        """Tradeable types from the SDE file, or the built-in fallback list."""
        if not self.types_file.exists():
            logger.warning(f"{self.types_file} not found, falling back to built-in items")
            return self.fallback_catalog()

        logger.info(f"Loading tradeable items from {self.types_file}...")
        try:
            with open(self.types_file, encoding='utf-8') as f:
                types_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading SDE data: {e}")
            return self.fallback_catalog()

        entries = self.parse_types(types_data or {})
        logger.info(f"[SUCCESS] {len(entries):,} tradeable items")
        return entries

    @staticmethod
    def fallback_catalog() -> List[CatalogEntry]:
        return [CatalogEntry(id=type_id, name=name) for type_id, name in EVE_FALLBACK_ITEMS]

    @staticmethod
    def parse_types(types_data: dict) -> List[CatalogEntry]:
        """Keep published types that belong to a market group."""
        entries = []
        for type_id, type_data in types_data.items():
            if not isinstance(type_data, dict):
                continue
            # Cleaned SDE files keep only the name of tradeable types
            cleaned = set(type_data) == {'name'}
            if not cleaned and not (type_data.get('marketGroupID') and type_data.get('published')):
                continue
            name = type_data.get('name')
            if isinstance(name, dict):
                name = name.get('en') or next(iter(name.values()), None)
            try:
                type_id = int(type_id)
            except (TypeError, ValueError):
                continue
            entries.append(CatalogEntry(id=type_id, name=name or f"Item {type_id}"))
        return entries

    def fetch_history(self, item_id) -> Optional[list]:
        """Daily history records for a type in the configured region, or None."""
        data = self._fetch_or_none(
            f"EVE type {item_id}",
            self.history_url.format(region_id=self.region_id),
            params={'datasource': 'tranquility', 'type_id': item_id}
        )
        if not isinstance(data, list) or not data:
            return None
        return data
