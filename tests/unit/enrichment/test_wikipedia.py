"""
Tests for the Wikipedia client.
"""

from typing import Any, Dict, List

import httpx
import pytest

from landmark_lens.cache.specialized import LocationCache
from landmark_lens.enrichment.wikipedia import WikipediaClient
from landmark_lens.exceptions import EnrichmentError
from landmark_lens.models.landmark import Coordinates

API_URL = "https://wiki.test/w/api.php"
BASE_URL = "https://wiki.test/wiki/"

EIFFEL_PAGE = {
    "pageid": 9232,
    "title": "Eiffel Tower",
    "extract": (
        "The Eiffel Tower is a wrought-iron lattice tower in Paris. "
        "It was constructed from 1887 to 1889. "
        "Visitors reach it by metro."
    ),
    "thumbnail": {"source": "https://upload.test/eiffel.jpg"},
    "coordinates": [{"lat": 48.8584, "lon": 2.2945}],
    "categories": [
        {"title": "Category:Tourist attractions in Paris"},
        {"title": "Category:Articles with short description"},
    ],
}


class FakeWiki:
    """MediaWiki stand-in routing on query parameters."""

    def __init__(
        self,
        search: List[Dict[str, Any]] = None,
        geosearch: List[Dict[str, Any]] = None,
        pages: Dict[int, Dict[str, Any]] = None,
    ):
        self.search = search or []
        self.geosearch = geosearch or []
        self.pages = pages or {}
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = request.url.params

        if params.get("meta") == "siteinfo":
            return httpx.Response(200, json={"query": {"general": {}}})
        if params.get("list") == "search":
            return httpx.Response(200, json={"query": {"search": self.search}})
        if params.get("list") == "geosearch":
            return httpx.Response(200, json={"query": {"geosearch": self.geosearch}})
        if params.get("pageids"):
            page_id = params["pageids"]
            page = self.pages.get(int(page_id), {"missing": ""})
            return httpx.Response(200, json={"query": {"pages": {page_id: page}}})
        return httpx.Response(400)

    def calls(self, **match: str) -> int:
        return sum(
            1
            for request in self.requests
            if all(request.url.params.get(k) == v for k, v in match.items())
        )


def wiki_client(handler, location_cache=None) -> WikipediaClient:
    return WikipediaClient(
        api_url=API_URL,
        base_url=BASE_URL,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        location_cache=location_cache,
    )


class TestSearch:
    """Test the raw query operations."""

    @pytest.mark.asyncio
    async def test_search_by_title(self):
        """Test full-text search parameters and parsing."""
        wiki = FakeWiki(search=[{"pageid": 1, "title": "Eiffel Tower", "snippet": "iron"}])

        results = await wiki_client(wiki).search_by_title("Eiffel Tower", limit=3)

        assert results[0].pageid == 1
        params = wiki.requests[0].url.params
        assert params["action"] == "query"
        assert params["format"] == "json"
        assert params["srsearch"] == "Eiffel Tower"
        assert params["srlimit"] == "3"

    @pytest.mark.asyncio
    async def test_search_by_coordinates(self):
        """Test proximity search parameters and parsing."""
        wiki = FakeWiki(
            geosearch=[{"pageid": 2, "title": "Louvre", "lat": 48.86, "lon": 2.33, "dist": 50.5}]
        )

        results = await wiki_client(wiki).search_by_coordinates(48.86, 2.33, radius=500, limit=2)

        assert results[0].title == "Louvre"
        assert results[0].coordinates == Coordinates(lat=48.86, lng=2.33)
        params = wiki.requests[0].url.params
        assert params["gscoord"] == "48.86|2.33"
        assert params["gsradius"] == "500"

    @pytest.mark.asyncio
    async def test_page_details(self):
        """Test page parsing."""
        wiki = FakeWiki(pages={9232: EIFFEL_PAGE})

        page = await wiki_client(wiki).get_page_details(9232)

        assert page.title == "Eiffel Tower"
        assert page.thumbnail == "https://upload.test/eiffel.jpg"
        assert page.coordinates == Coordinates(lat=48.8584, lng=2.2945)
        assert len(page.categories) == 2

    @pytest.mark.asyncio
    async def test_missing_page(self):
        """Test missing page is None."""
        assert await wiki_client(FakeWiki()).get_page_details(404) is None

    @pytest.mark.asyncio
    async def test_http_failure_raises(self):
        """Test non-2xx status."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        with pytest.raises(EnrichmentError, match="Failed to search Wikipedia"):
            await wiki_client(handler).search_by_title("x")

    @pytest.mark.asyncio
    async def test_api_error_payload_raises(self):
        """Test MediaWiki error object."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"error": {"info": "badparam"}})

        with pytest.raises(EnrichmentError, match="badparam"):
            await wiki_client(handler).search_by_title("x")

    @pytest.mark.asyncio
    async def test_off_earth_coordinates_raise(self):
        """Test a page on another globe is reported as malformed."""
        page = {**EIFFEL_PAGE, "coordinates": [{"lat": 18.65, "lon": 226.2}]}
        wiki = FakeWiki(pages={9232: page})

        with pytest.raises(EnrichmentError, match="Unexpected Wikipedia page 9232"):
            await wiki_client(wiki).get_page_details(9232)

    @pytest.mark.asyncio
    async def test_page_without_title_raises(self):
        """Test missing required page fields."""
        page = {key: value for key, value in EIFFEL_PAGE.items() if key != "title"}

        with pytest.raises(EnrichmentError):
            await wiki_client(FakeWiki(pages={9232: page})).get_page_details(9232)

    @pytest.mark.asyncio
    async def test_malformed_search_rows_raise(self):
        """Test search rows missing required fields."""
        wiki = FakeWiki(geosearch=[{"pageid": 1, "title": "Nowhere", "lat": 95.0}])

        with pytest.raises(EnrichmentError, match="Unexpected Wikipedia response"):
            await wiki_client(wiki).search_by_coordinates(0.0, 0.0)


class TestEnrichedLocationData:
    """Test landmark resolution."""

    @pytest.fixture
    def wiki(self) -> FakeWiki:
        """Create wiki with the Eiffel Tower and its neighbours."""
        return FakeWiki(
            search=[{"pageid": 9232, "title": "Eiffel Tower"}],
            geosearch=[
                {"pageid": 9232, "title": "Eiffel Tower", "lat": 48.8584, "lon": 2.2945},
                {"pageid": 1, "title": "Champ de Mars", "lat": 48.856, "lon": 2.298},
                {"pageid": 2, "title": "Trocadéro", "lat": 48.862, "lon": 2.288},
            ],
            pages={9232: EIFFEL_PAGE},
        )

    @pytest.mark.asyncio
    async def test_resolves_by_title(self, wiki):
        """Test full enrichment record."""
        location = await wiki_client(wiki).get_enriched_location_data("Eiffel Tower")

        assert location.title == "Eiffel Tower"
        assert location.description == (
            "The Eiffel Tower is a wrought-iron lattice tower in Paris. "
            "It was constructed from 1887 to 1889."
        )
        assert location.wikipedia_url == "https://wiki.test/wiki/Eiffel_Tower"
        assert location.coordinates == Coordinates(lat=48.8584, lng=2.2945)
        assert location.nearby_places == ["Champ de Mars", "Trocadéro"]
        assert location.categories == ["Tourist attractions in Paris"]
        assert location.activities == ["Sightseeing", "Photography"]
        assert location.historical_context == "It was constructed from 1887 to 1889."
        assert location.accessibility == "Visitors reach it by metro."
        assert location.thumbnail == "https://upload.test/eiffel.jpg"

    @pytest.mark.asyncio
    async def test_page_without_coordinates_has_no_nearby_places(self):
        """Test coordinate-less pages still resolve."""
        page = {**EIFFEL_PAGE, "coordinates": []}
        wiki = FakeWiki(search=[{"pageid": 9232, "title": "Eiffel Tower"}], pages={9232: page})

        location = await wiki_client(wiki).get_enriched_location_data("Eiffel Tower")

        assert location is not None
        assert location.nearby_places == []
        assert location.coordinates is None
        assert wiki.calls(list="geosearch") == 0

    @pytest.mark.asyncio
    async def test_detection_coordinates_used_when_page_has_none(self):
        """Test the detection position anchors the nearby search."""
        page = {**EIFFEL_PAGE, "coordinates": []}
        wiki = FakeWiki(
            search=[{"pageid": 9232, "title": "Eiffel Tower"}],
            geosearch=[{"pageid": 1, "title": "Champ de Mars", "lat": 48.856, "lon": 2.298}],
            pages={9232: page},
        )
        detected = Coordinates(lat=48.85, lng=2.29)

        location = await wiki_client(wiki).get_enriched_location_data("Eiffel Tower", detected)

        assert location.coordinates == detected
        assert location.nearby_places == ["Champ de Mars"]

    @pytest.mark.asyncio
    async def test_falls_back_to_proximity_search(self, wiki):
        """Test unknown names resolve through coordinates."""
        wiki.search = []

        location = await wiki_client(wiki).get_enriched_location_data(
            "Tour Eiffel", Coordinates(lat=48.8584, lng=2.2945)
        )

        assert location.title == "Eiffel Tower"

    @pytest.mark.asyncio
    async def test_no_match(self):
        """Test unknown name without coordinates."""
        assert await wiki_client(FakeWiki()).get_enriched_location_data("Nowhere") is None

    @pytest.mark.asyncio
    async def test_results_are_cached(self, wiki, clock):
        """Test second lookup does not hit the API."""
        cache = LocationCache(clock=clock)
        client = wiki_client(wiki, location_cache=cache)

        first = await client.get_enriched_location_data("Eiffel Tower")
        request_count = len(wiki.requests)
        second = await client.resolve("eiffel tower")

        assert second == first
        assert len(wiki.requests) == request_count
        anchor = Coordinates(lat=48.8584, lng=2.2945).as_key()
        assert cache.get_nearby_places(anchor) == ["Champ de Mars", "Trocadéro"]


class TestAvailability:
    """Test availability check."""

    @pytest.mark.asyncio
    async def test_available(self):
        """Test successful check."""
        assert await wiki_client(FakeWiki()).is_service_available() is True

    @pytest.mark.asyncio
    async def test_unreachable(self):
        """Test transport failure."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable")

        assert await wiki_client(handler).is_service_available() is False
