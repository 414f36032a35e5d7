"""
Search Service - Domain-restricted part lookups through the Google Custom Search API
"""
import logging
from typing import Callable, Iterable, List, Optional
from urllib.parse import urlparse

import requests

from partfinder.errors import ProviderError
from partfinder.models import SearchResult
from partfinder.settings import SEARCH_PAGE_SIZE, Settings

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"


def build_site_query(part_number: str, domains: Iterable[str]) -> str:
    """
    Append site: filters for the given domains to a part number.

    Example:
        build_site_query("LM317", ["digikey.com"]) -> "LM317 site:digikey.com"
    """
    filters = [f"site:{domain}" for domain in domains]
    if not filters:
        return part_number
    return f"{part_number} {' OR '.join(filters)}"


def build_datasheet_query(part_number: str) -> str:
    return f"{part_number} datasheet filetype:pdf"


def link_matches_domain(link: str, domains: Iterable[str]) -> bool:
    host = (urlparse(link).hostname or "").lower()
    for domain in domains:
        domain = domain.lower()
        if host == domain or host.endswith("." + domain):
            return True
    return False


def is_pdf_link(link: str) -> bool:
    return urlparse(link).path.lower().endswith(".pdf")


class SearchService:
    """Thin client over the Custom Search JSON API."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.api_key = settings.google_api_key
        self.cx = settings.google_cx
        self.timeout = settings.request_timeout
        self.default_max_results = settings.search_max_results
        self.distributor_domains = settings.distributor_domains
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.cx)

    def search(
        self,
        query: str,
        domain_hints: Iterable[str] = (),
        max_results: Optional[int] = None,
        link_filter: Optional[Callable[[str], bool]] = None,
    ) -> List[SearchResult]:
        """
        Run one search and return at most `max_results` hits in provider order.

        Args:
            query: Full query string, site: or filetype: filters included
            domain_hints: Only keep links on these domains (empty keeps everything)
            max_results: Result cap, defaults to the configured cap
            link_filter: Extra predicate a link must pass, applied before the cap

        Returns:
            List of SearchResult

        Raises:
            ProviderError: credentials are missing or the provider answered non-2xx
        """
        if not self.configured:
            raise ProviderError("Search provider is not configured (GOOGLE_API_KEY / GOOGLE_CX)")

        limit = max_results or self.default_max_results
        domains = list(domain_hints)
        # Filtered searches ask for a full page so dropped links do not use up the cap
        page_size = SEARCH_PAGE_SIZE if domains or link_filter is not None else min(limit, SEARCH_PAGE_SIZE)

        try:
            resp = self.session.get(
                GOOGLE_SEARCH_URL,
                params={
                    "key": self.api_key,
                    "cx": self.cx,
                    "q": query,
                    "num": page_size,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ProviderError(f"Search request failed: {e}") from e

        if not resp.ok:
            raise ProviderError(f"Search provider returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError("Search provider returned invalid JSON") from e

        results = []
        for item in data.get("items") or []:
            link = item.get("link") or ""
            if not link:
                continue
            if domains and not link_matches_domain(link, domains):
                continue
            if link_filter is not None and not link_filter(link):
                continue
            results.append(SearchResult(
                title=item.get("title") or "",
                link=link,
                snippet=item.get("snippet") or "",
            ))
            if len(results) >= limit:
                break

        logger.info("Search '%s' returned %d result(s)", query, len(results))
        return results

    def search_distributors(self, part_number: str, max_results: Optional[int] = None) -> List[SearchResult]:
        query = build_site_query(part_number, self.distributor_domains)
        return self.search(query, self.distributor_domains, max_results)

    def search_datasheets(self, part_number: str, max_results: Optional[int] = None) -> List[SearchResult]:
        query = build_datasheet_query(part_number)
        return self.search(query, (), max_results, link_filter=is_pdf_link)
