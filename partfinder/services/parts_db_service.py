"""
Parts Database Service - Structured part attributes from the Nexar (Octopart) GraphQL API
"""
import logging
import threading
import time
from typing import Any, Dict, List, Optional, Sequence

import requests

from partfinder.errors import ProviderError
from partfinder.models import NOT_FOUND, PartRecord, SpecComparison
from partfinder.settings import Settings

logger = logging.getLogger(__name__)

NEXAR_TOKEN_URL = "https://identity.nexar.com/connect/token"
NEXAR_GRAPHQL_URL = "https://api.nexar.com/graphql"

# Used when the token response has no expires_in
DEFAULT_TOKEN_LIFETIME = 3600.0
# Refetch this many seconds before the token expires
TOKEN_EXPIRY_MARGIN = 60.0

SEARCH_MPN_QUERY = """
query getParts($mpns: [String!]!) {
  supSearchMpn(q: { mpn_or_sku: $mpns }) {
    hits {
      mpn
      manufacturer {
        name
      }
      specs {
        attribute {
          name
        }
        display_value
      }
      bestDatasheet {
        url
      }
    }
  }
}
"""


def _normalize_mpn(mpn: str) -> str:
    return (mpn or "").strip().upper()


def _hit_to_record(hit: Dict[str, Any]) -> PartRecord:
    specs = {}
    for spec in hit.get("specs") or []:
        name = ((spec.get("attribute") or {}).get("name") or "").strip()
        if name and name not in specs:
            specs[name] = spec.get("display_value") or ""
    datasheet = hit.get("bestDatasheet") or {}
    return PartRecord(
        mpn=hit.get("mpn") or "",
        manufacturer=(hit.get("manufacturer") or {}).get("name") or "Unknown",
        specs=specs,
        datasheet_url=datasheet.get("url") or None,
    )


def compare_specs(record_a: PartRecord, record_b: PartRecord) -> SpecComparison:
    """
    Split the union of both parts' attributes into equal values and differences.

    Attribute order follows part A's specs, then part B's remaining ones.
    """
    comparison = SpecComparison()
    names = list(record_a.specs)
    names.extend(name for name in record_b.specs if name not in record_a.specs)

    for name in names:
        value_a = record_a.specs.get(name)
        value_b = record_b.specs.get(name)
        if value_a and value_b and value_a == value_b:
            comparison.similarities.append({"attribute": name, "value": value_a})
        else:
            comparison.differences.append({
                "attribute": name,
                "partA": value_a or NOT_FOUND,
                "partB": value_b or NOT_FOUND,
            })
    return comparison


class PartsDatabaseService:
    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.api_key = settings.nexar_api_key
        self.client_id = settings.nexar_client_id
        self.client_secret = settings.nexar_client_secret
        self.timeout = settings.request_timeout
        self.session = session or requests.Session()
        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        # Both sides of a comparison look up concurrently
        self._token_lock = threading.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.api_key or (self.client_id and self.client_secret))

    def _get_token(self) -> str:
        """Return a bearer token, fetching one by client credentials if none is cached or it expired."""
        if self.api_key:
            return self.api_key

        with self._token_lock:
            if self._token and time.monotonic() < self._token_expires_at:
                return self._token
            if not (self.client_id and self.client_secret):
                raise ProviderError("Parts database is not configured (NEXAR_CLIENT_ID / NEXAR_CLIENT_SECRET)")

            try:
                resp = self.session.post(
                    NEXAR_TOKEN_URL,
                    data={
                        "grant_type": "client_credentials",
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                    },
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                raise ProviderError(f"Parts database token request failed: {e}") from e

            if resp.status_code != 200:
                raise ProviderError(f"Parts database token request returned HTTP {resp.status_code}")

            try:
                data = resp.json() or {}
            except ValueError as e:
                raise ProviderError("Parts database token response was not JSON") from e

            token = data.get("access_token")
            if not token:
                raise ProviderError("Parts database token response had no access_token")

            try:
                lifetime = float(data.get("expires_in") or DEFAULT_TOKEN_LIFETIME)
            except (TypeError, ValueError):
                lifetime = DEFAULT_TOKEN_LIFETIME
            self._token = token
            self._token_expires_at = time.monotonic() + max(lifetime - TOKEN_EXPIRY_MARGIN, 0.0)
            logger.info("Fetched parts database token (expires in %ds)", int(lifetime))
            return token

    def _invalidate_token(self, token: str) -> None:
        with self._token_lock:
            if self._token == token:
                self._token = None
                self._token_expires_at = 0.0

    def _post_query(self, token: str, mpns: List[str]) -> requests.Response:
        try:
            return self.session.post(
                NEXAR_GRAPHQL_URL,
                json={"query": SEARCH_MPN_QUERY, "variables": {"mpns": mpns}},
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ProviderError(f"Parts database request failed: {e}") from e

    def lookup(self, mpns: Sequence[str]) -> List[Optional[PartRecord]]:
        """
        Look up several part numbers in one query.

        Args:
            mpns: Part numbers, in the order the caller wants results back

        Returns:
            One entry per input part number: the matching PartRecord, or None

        Raises:
            ProviderError: transport, HTTP or GraphQL failure
        """
        unique = list(dict.fromkeys(mpn for mpn in mpns if mpn))

        token = self._get_token()
        resp = self._post_query(token, unique)
        if resp.status_code == 401 and not self.api_key:
            # Token was revoked or expired early; fetch a new one and retry once
            logger.info("Parts database rejected the cached token, fetching a new one")
            self._invalidate_token(token)
            resp = self._post_query(self._get_token(), unique)

        if not resp.ok:
            raise ProviderError(f"Parts database returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError("Parts database returned invalid JSON") from e

        if not data or not data.get("data"):
            errors = (data or {}).get("errors") or []
            message = errors[0].get("message") if errors and isinstance(errors[0], dict) else "no data"
            raise ProviderError(f"Invalid response from parts database: {message}")

        hits = (data["data"].get("supSearchMpn") or {}).get("hits") or []
        by_mpn: Dict[str, PartRecord] = {}
        for hit in hits:
            record = _hit_to_record(hit)
            key = _normalize_mpn(record.mpn)
            if key and key not in by_mpn:
                by_mpn[key] = record

        logger.info("Parts database matched %d of %d part number(s)", len(by_mpn), len(unique))
        return [by_mpn.get(_normalize_mpn(mpn)) for mpn in mpns]

    def lookup_one(self, mpn: str) -> Optional[PartRecord]:
        return self.lookup([mpn])[0]
