# core/search/google_books.py

import logging
import time
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import urlencode, quote

import requests
from bs4 import BeautifulSoup
from pydantic import ValidationError

from core.config import settings
from core.models.book import BookRecord, UNKNOWN_AUTHOR
from core.models.results import LookupResult
from core.search.cache import TTLCache

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_LENGTH = 300
PLACEHOLDER_IMAGE = "assets/images/placeholder.jpg"
SOURCE = "google-books"

DEFAULT_PARAMS = {
    "printType": "books",
    "orderBy": "relevance",
}

class BookSearch(Protocol):
    """What the library needs from an external book lookup"""

    def fetch_book_details(self, external_id: str) -> LookupResult:
        ...

def clean_description(description: Optional[str]) -> str:
    """Strip HTML and shorten long descriptions to DESCRIPTION_MAX_LENGTH characters."""
    if not description:
        return "No description available"
    text = BeautifulSoup(description, "html.parser").get_text()
    if len(text) > DESCRIPTION_MAX_LENGTH:
        return text[:DESCRIPTION_MAX_LENGTH] + "..."
    return text

def extract_isbn(identifiers: List[Dict[str, Any]]) -> str:
    """Prefer ISBN_13, then ISBN_10; empty string when neither is listed."""
    for isbn_type in ("ISBN_13", "ISBN_10"):
        for identifier in identifiers or []:
            if isinstance(identifier, dict) and identifier.get("type") == isbn_type:
                return identifier.get("identifier", "")
    return ""

def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}

def format_volume(item: Dict[str, Any], language: str = "en") -> Dict[str, Any]:
    """Shape one Google Books volume into book record fields"""
    info = _mapping(item.get("volumeInfo"))
    images = _mapping(info.get("imageLinks"))
    return {
        "id": item.get("id"),
        "title": info.get("title") or "Unknown title",
        "authors": info.get("authors") or [UNKNOWN_AUTHOR],
        "publisher": info.get("publisher") or "Unknown publisher",
        "publishedDate": info.get("publishedDate") or "Unknown date",
        "description": clean_description(info.get("description")),
        "thumbnail": images.get("thumbnail") or images.get("smallThumbnail") or PLACEHOLDER_IMAGE,
        "cover": (images.get("large") or images.get("medium") or images.get("thumbnail")
                  or PLACEHOLDER_IMAGE),
        "pageCount": info.get("pageCount") or 0,
        "categories": info.get("categories") or ["Uncategorized"],
        "language": info.get("language") or language,
        "isbn": extract_isbn(info.get("industryIdentifiers") or []),
        "source": SOURCE,
    }

def format_volume_details(item: Dict[str, Any], language: str = "en") -> Dict[str, Any]:
    info = _mapping(item.get("volumeInfo"))
    return {
        **format_volume(item, language),
        "subtitle": info.get("subtitle") or "",
        "averageRating": info.get("averageRating") or 0,
        "ratingsCount": info.get("ratingsCount") or 0,
        "maturityRating": info.get("maturityRating") or "NOT_MATURE",
        "previewLink": info.get("previewLink") or "",
        "infoLink": info.get("infoLink") or "",
        "canonicalVolumeLink": info.get("canonicalVolumeLink") or "",
    }

class GoogleBooksClient:
    """Google Books volumes API client with a short-lived response cache."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 max_results: Optional[int] = None, timeout: Optional[float] = None,
                 cache: Optional[TTLCache] = None, session: Optional[requests.Session] = None,
                 language: Optional[str] = None, retries: int = 1):
        self.api_key = api_key if api_key is not None else settings.google_books_api_key
        self.base_url = (base_url or settings.google_books_base_url).rstrip("/")
        self.max_results = max_results or settings.google_books_max_results
        self.timeout = timeout or settings.google_books_timeout
        self.language = language or settings.google_books_language
        self.cache = cache if cache is not None else TTLCache(settings.search_cache_seconds)
        self.session = session or requests.Session()
        self.retries = max(1, retries)

    def build_url(self, query: str, options: Optional[Dict[str, Any]] = None) -> str:
        params = {"q": query, "maxResults": self.max_results, **DEFAULT_PARAMS, **(options or {})}
        params = {key: value for key, value in params.items() if value is not None}
        if self.api_key:
            params["key"] = self.api_key
        return f"{self.base_url}?{urlencode(params)}"

    def _details_url(self, external_id: str) -> str:
        url = f"{self.base_url}/{quote(external_id, safe='')}"
        if self.api_key:
            url += f"?{urlencode({'key': self.api_key})}"
        return url

    def _get(self, url: str) -> requests.Response:
        """GET with exponential backoff on network errors."""
        delay = 0.5
        for attempt in range(1, self.retries + 1):
            try:
                return self.session.get(url, timeout=self.timeout)
            except requests.RequestException as e:
                if attempt == self.retries:
                    raise
                logger.warning(f"Request attempt {attempt} failed for {url}: {e}. Retrying in {delay}s")
                time.sleep(delay)
                delay *= 2

    def search(self, query: str, **options) -> List[BookRecord]:
        """Search volumes; errors are logged and give an empty result."""
        query = (query or "").strip()
        if len(query) < 2:
            logger.info("Search query must contain at least 2 characters")
            return []

        cache_key = f"search_{query}_{sorted(options.items())}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return [book.model_copy(deep=True) for book in cached]

        try:
            response = self._get(self.build_url(query, options))
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Google Books search failed for {query!r}: {e}")
            return []

        if not isinstance(payload, dict):
            logger.error(f"Unexpected Google Books response for {query!r}: {type(payload).__name__}")
            return []

        items = payload.get("items")
        books = []
        for item in items if isinstance(items, list) else []:
            if not isinstance(item, dict):
                logger.debug(f"Skipping non-object volume {item!r}")
                continue
            try:
                books.append(BookRecord.model_validate(format_volume(item, self.language)))
            except ValidationError as e:
                logger.debug(f"Skipping unusable volume {item.get('id')!r}: {e}")
        self.cache.set(cache_key, books)
        return [book.model_copy(deep=True) for book in books]

    def fetch_book_details(self, external_id: str) -> LookupResult:
        if not external_id:
            return LookupResult.not_found("A book id is required")

        cache_key = f"details_{external_id}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return LookupResult.hit(cached.model_copy(deep=True))

        try:
            response = self._get(self._details_url(external_id))
        except requests.RequestException as e:
            logger.error(f"Google Books lookup failed for {external_id}: {e}")
            return LookupResult.transient(f"Network error: {e}")

        if response.status_code in (400, 404):
            return LookupResult.not_found(f"Book {external_id} not found")
        if response.status_code == 429:
            return LookupResult.transient("Too many requests; wait a moment and retry")
        if response.status_code == 403:
            return LookupResult.transient("Access denied by Google Books; check the API key")
        if response.status_code >= 400:
            return LookupResult.transient(f"Google Books returned {response.status_code}")

        try:
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError(f"expected an object, got {type(payload).__name__}")
            record = BookRecord.model_validate(format_volume_details(payload, self.language))
        except (ValueError, ValidationError) as e:
            logger.error(f"Unreadable Google Books response for {external_id}: {e}")
            return LookupResult.transient("Unreadable response from Google Books")

        self.cache.set(cache_key, record)
        return LookupResult.hit(record.model_copy(deep=True))
