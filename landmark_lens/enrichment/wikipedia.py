"""
Wikipedia enrichment client.

Sandi Metz Principles:
- Single Responsibility: MediaWiki queries and result shaping
- Small methods: One query shape per method
- Dependency Injection: HTTP client and cache injected
"""

from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from landmark_lens.cache.specialized import LocationCache
from landmark_lens.config import config
from landmark_lens.enrichment import text_mining
from landmark_lens.exceptions import EnrichmentError
from landmark_lens.models.landmark import Coordinates
from landmark_lens.models.location import (
    EnrichedLocationData,
    GeoSearchResult,
    WikiPage,
    WikiSearchResult,
)
from landmark_lens.utils.logger import get_logger, log_cache_hit, log_cache_miss

logger = get_logger(__name__)

TITLE_SEARCH_LIMIT = 3
PROXIMITY_RADIUS_M = 5000
PROXIMITY_LIMIT = 5
NEARBY_RADIUS_M = 10000
NEARBY_LIMIT = 8
MAX_NEARBY_PLACES = 5
THUMBNAIL_SIZE = 500

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse_rows(model: Type[ModelT], rows: List[Dict[str, Any]]) -> List[ModelT]:
    """
    Validate result rows.

    Raises:
        EnrichmentError: If a row does not fit the model
    """
    try:
        return [model.model_validate(row) for row in rows]
    except ValidationError as e:
        logger.warning("Malformed Wikipedia rows", model=model.__name__, error=str(e))
        raise EnrichmentError(f"Unexpected Wikipedia response: {e}") from e


class WikipediaClient:
    """
    Resolves landmark names to encyclopedic context.

    "No match" is an ordinary None result; transport failures and
    malformed responses raise EnrichmentError.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        location_cache: Optional[LocationCache] = None,
    ):
        """
        Initialize Wikipedia client.

        Args:
            api_url: MediaWiki action API endpoint (uses config if None)
            base_url: Article URL prefix (uses config if None)
            timeout_seconds: Request timeout (uses config if None)
            http_client: Optional shared HTTP client (created lazily if None)
            location_cache: Optional memo for resolved locations
        """
        self._api_url = api_url or config.wikipedia_api_url
        self._base_url = base_url or config.wikipedia_base_url
        self._timeout = timeout_seconds or config.wikipedia_request_timeout_seconds
        self._client = http_client
        self._owns_client = http_client is None
        self._cache = location_cache

    async def search_by_title(self, query: str, limit: int = 5) -> List[WikiSearchResult]:
        """
        Full-text search for pages.

        Args:
            query: Search text
            limit: Maximum results

        Returns:
            Matching pages, best match first
        """
        data = await self._query(
            {"list": "search", "srsearch": query, "srlimit": limit}
        )
        rows = data.get("query", {}).get("search") or []
        return _parse_rows(WikiSearchResult, rows)

    async def search_by_coordinates(
        self, lat: float, lng: float, radius: int = 10000, limit: int = 10
    ) -> List[GeoSearchResult]:
        """
        Find pages near a position.

        Args:
            lat: Latitude
            lng: Longitude
            radius: Search radius in metres
            limit: Maximum results

        Returns:
            Pages ordered by distance, closest first
        """
        data = await self._query(
            {
                "list": "geosearch",
                "gscoord": f"{lat}|{lng}",
                "gsradius": radius,
                "gslimit": limit,
            }
        )
        rows = data.get("query", {}).get("geosearch") or []
        return _parse_rows(GeoSearchResult, rows)

    async def get_page_details(self, page_id: int) -> Optional[WikiPage]:
        """
        Fetch extract, thumbnail, coordinates and categories of a page.

        Args:
            page_id: Page identifier

        Returns:
            Page record, or None if the page does not exist

        Raises:
            EnrichmentError: On transport failure or a malformed page
        """
        data = await self._query(
            {
                "pageids": page_id,
                "prop": "extracts|pageimages|coordinates|categories",
                "exintro": 1,
                "explaintext": 1,
                "piprop": "thumbnail",
                "pithumbsize": THUMBNAIL_SIZE,
                "cllimit": "max",
            }
        )
        page = data.get("query", {}).get("pages", {}).get(str(page_id))
        if not page or "missing" in page:
            return None

        try:
            return self._parse_page(page)
        except (ValidationError, KeyError, TypeError, IndexError) as e:
            logger.warning("Malformed Wikipedia page", page_id=page_id, error=str(e))
            raise EnrichmentError(f"Unexpected Wikipedia page {page_id}: {e}") from e

    @staticmethod
    def _parse_page(page: Dict[str, Any]) -> WikiPage:
        coordinates = None
        if page.get("coordinates"):
            primary = page["coordinates"][0]
            coordinates = Coordinates(lat=primary["lat"], lng=primary["lon"])

        return WikiPage(
            pageid=page["pageid"],
            title=page["title"],
            extract=page.get("extract") or "",
            thumbnail=(page.get("thumbnail") or {}).get("source"),
            coordinates=coordinates,
            categories=[row["title"] for row in page.get("categories") or []],
        )

    async def get_enriched_location_data(
        self, landmark_name: str, coordinates: Optional[Coordinates] = None
    ) -> Optional[EnrichedLocationData]:
        """
        Resolve a landmark to enriched location data.

        Searches by name first, then by proximity when coordinates are
        known.

        Args:
            landmark_name: Detected landmark name
            coordinates: Optional detection coordinates

        Returns:
            Enriched data, or None if nothing matched

        Raises:
            EnrichmentError: On transport or API failure
        """
        if self._cache is not None:
            cached = self._cache.get_location_data(landmark_name)
            if cached is not None:
                log_cache_hit(landmark_name, cache="location")
                return cached
            log_cache_miss(landmark_name, cache="location")

        page = await self._find_page(landmark_name, coordinates)
        if page is None:
            logger.info("No Wikipedia page found", landmark=landmark_name)
            return None

        anchor = page.coordinates or coordinates
        nearby = await self._nearby_places(anchor, exclude=page.title) if anchor else []
        location = self._build_location(page, anchor, nearby)

        if self._cache is not None:
            self._cache.set_location_data(landmark_name, location)
        return location

    resolve = get_enriched_location_data

    async def _find_page(
        self, landmark_name: str, coordinates: Optional[Coordinates]
    ) -> Optional[WikiPage]:
        results = await self.search_by_title(landmark_name, limit=TITLE_SEARCH_LIMIT)
        if results:
            return await self.get_page_details(results[0].pageid)

        if coordinates is None:
            return None

        nearby = await self.search_by_coordinates(
            coordinates.lat, coordinates.lng, radius=PROXIMITY_RADIUS_M, limit=PROXIMITY_LIMIT
        )
        if not nearby:
            return None
        return await self.get_page_details(nearby[0].pageid)

    async def _nearby_places(self, anchor: Coordinates, exclude: str) -> List[str]:
        """
        List titles of pages near a position.

        Args:
            anchor: Search centre
            exclude: Title of the resolved page

        Returns:
            Up to MAX_NEARBY_PLACES titles
        """
        key = anchor.as_key()
        if self._cache is not None:
            cached = self._cache.get_nearby_places(key)
            if cached is not None:
                return cached

        results = await self.search_by_coordinates(
            anchor.lat, anchor.lng, radius=NEARBY_RADIUS_M, limit=NEARBY_LIMIT
        )
        places = [row.title for row in results if row.title != exclude][:MAX_NEARBY_PLACES]

        if self._cache is not None:
            self._cache.set_nearby_places(key, places)
        return places

    def _build_location(
        self, page: WikiPage, coordinates: Optional[Coordinates], nearby: List[str]
    ) -> EnrichedLocationData:
        extract = page.extract
        categories = text_mining.clean_categories(page.categories)
        best_time, accessibility = text_mining.extract_visiting_info(extract)

        return EnrichedLocationData(
            title=page.title,
            description=text_mining.create_short_description(extract),
            full_description=extract,
            coordinates=coordinates,
            categories=categories,
            thumbnail=page.thumbnail,
            wikipedia_url=self._base_url + quote(page.title.replace(" ", "_")),
            nearby_places=nearby,
            cultural_significance=text_mining.extract_cultural_significance(extract),
            historical_context=text_mining.extract_historical_context(extract),
            best_time_to_visit=best_time,
            accessibility=accessibility,
            activities=text_mining.extract_activities(extract, categories) or None,
        )

    async def _query(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run an action=query request.

        Args:
            params: Query-specific parameters

        Returns:
            Decoded JSON payload

        Raises:
            EnrichmentError: On transport failure, non-2xx status or API error
        """
        try:
            response = await self._get_client().get(
                self._api_url, params={"action": "query", "format": "json", **params}
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Wikipedia request failed", error=str(e))
            raise EnrichmentError(f"Failed to search Wikipedia: {e}") from e

        if "error" in data:
            info = data["error"].get("info", "unknown error")
            raise EnrichmentError(f"Failed to search Wikipedia: {info}")
        return data

    async def is_service_available(self) -> bool:
        """
        Check the API with a siteinfo request.

        Returns:
            True if the API answered successfully
        """
        try:
            response = await self._get_client().get(
                self._api_url,
                params={"action": "query", "meta": "siteinfo", "format": "json"},
                timeout=config.wikipedia_health_timeout_seconds,
            )
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning("Wikipedia availability check failed", error=str(e))
            return False

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers={"User-Agent": f"{config.app_name}/0.1.0"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
