"""
Distributor Service - Pull named specification fields from distributor product pages
"""
import logging
import re
from typing import Dict, Iterable, Optional

import requests
from bs4 import BeautifulSoup

from partfinder.models import NOT_FOUND, DistributorFieldSet
from partfinder.settings import Settings

logger = logging.getLogger(__name__)

# Digi-Key's product attribute table
SPEC_TABLE_SELECTOR = 'table[data-testid="product-details-specs"]'

_WHITESPACE = re.compile(r"\s+")


def normalize_label(label: str) -> str:
    return _WHITESPACE.sub(" ", label or "").strip().casefold()


def parse_spec_rows(html: str) -> Dict[str, str]:
    """
    Read label/value pairs from the page's specification table.

    Labels come from the row's <th> (or first <td> when there is none) and are
    normalized. The first occurrence of a label wins.
    """
    soup = BeautifulSoup(html, "html.parser")
    tables = soup.select(SPEC_TABLE_SELECTOR) or soup.find_all("table")

    rows: Dict[str, str] = {}
    for table in tables:
        for tr in table.find_all("tr"):
            header = tr.find("th")
            cells = tr.find_all("td")
            if header is not None:
                label = header.get_text(" ", strip=True)
                value_cells = cells
            elif len(cells) >= 2:
                label = cells[0].get_text(" ", strip=True)
                value_cells = cells[1:]
            else:
                continue

            value = " ".join(cell.get_text(" ", strip=True) for cell in value_cells).strip()
            key = normalize_label(label)
            if key and key not in rows:
                rows[key] = _WHITESPACE.sub(" ", value)
    return rows


class DistributorExtractor:
    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.timeout = settings.request_timeout
        self.user_agent = settings.user_agent
        self.session = session or requests.Session()

    def extract(self, url: str, field_names: Iterable[str]) -> Optional[DistributorFieldSet]:
        """
        Fetch a product page and look up each requested field by exact label.

        Args:
            url: Distributor product page URL
            field_names: Labels to extract, e.g. "Package / Case"

        Returns:
            DistributorFieldSet with NOT_FOUND for absent fields, or None if the
            page could not be fetched
        """
        try:
            resp = self.session.get(url, timeout=self.timeout, headers={"User-Agent": self.user_agent})
        except requests.RequestException as e:
            logger.warning("Distributor page fetch failed for %s: %s", url, e)
            return None

        if not resp.ok:
            logger.info("Distributor page %s returned HTTP %s", url, resp.status_code)
            return None

        rows = parse_spec_rows(resp.text)
        fields = {}
        for name in field_names:
            value = rows.get(normalize_label(name))
            fields[name] = value if value else NOT_FOUND

        found = sum(1 for value in fields.values() if value != NOT_FOUND)
        logger.debug("Extracted %d/%d field(s) from %s", found, len(fields), url)
        return DistributorFieldSet(source_url=url, fields=fields)
