"""
Shared fixtures: settings, fake HTTP sessions and stub adapters.
No test touches the network.
"""
from dataclasses import replace
from typing import Callable, Dict, List, Optional

import pytest
import requests

from partfinder.errors import GenerationError, ProviderError
from partfinder.models import NOT_FOUND, DistributorFieldSet, PartRecord, SearchResult
from partfinder.services.context_service import ContextAggregator
from partfinder.services.finder_service import PartFinderService
from partfinder.settings import Settings


class FakeResponse:
    def __init__(self, status_code: int = 200, json_data=None, text: str = "", content: bytes = b"",
                 headers: Optional[Dict[str, str]] = None):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.content = content
        self.headers = headers or {}
        self.closed = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start:start + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    """
    Stand-in for requests.Session. `handler(method, url, kwargs)` returns a
    FakeResponse or raises; every call is recorded.
    """

    def __init__(self, handler: Callable[[str, str, dict], FakeResponse]):
        self.handler = handler
        self.calls: List[Dict] = []

    def _call(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        return self.handler(method, url, kwargs)

    def get(self, url, **kwargs):
        return self._call("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._call("POST", url, **kwargs)


class StubSearch:
    """Search adapter returning canned results per part number."""

    def __init__(self, distributor: Optional[Dict[str, List[SearchResult]]] = None,
                 datasheets: Optional[Dict[str, List[SearchResult]]] = None,
                 fail: bool = False):
        self.distributor = distributor or {}
        self.datasheets = datasheets or {}
        self.fail = fail
        self.calls: List[tuple] = []

    def search_distributors(self, part_number, max_results=None):
        self.calls.append(("distributors", part_number))
        if self.fail:
            raise ProviderError("Search provider returned HTTP 500")
        return list(self.distributor.get(part_number, []))[:max_results]

    def search_datasheets(self, part_number, max_results=None):
        self.calls.append(("datasheets", part_number))
        if self.fail:
            raise ProviderError("Search provider returned HTTP 500")
        return list(self.datasheets.get(part_number, []))[:max_results]


class StubDistributor:
    """Distributor extractor returning canned field values per URL."""

    def __init__(self, pages: Optional[Dict[str, Optional[Dict[str, str]]]] = None):
        self.pages = pages or {}
        self.calls: List[str] = []

    def extract(self, url, field_names):
        self.calls.append(url)
        page = self.pages.get(url)
        if page is None:
            return None
        return DistributorFieldSet(
            source_url=url,
            fields={name: page.get(name, NOT_FOUND) for name in field_names},
        )


class StubDatasheet:
    def __init__(self, texts: Optional[Dict[str, str]] = None):
        self.texts = texts or {}
        self.calls: List[str] = []

    def extract(self, url, max_chars=None):
        self.calls.append(url)
        text = self.texts.get(url, "")
        return text[:max_chars] if max_chars is not None else text


class StubPartsDatabase:
    def __init__(self, records: Optional[Dict[str, PartRecord]] = None, fail: bool = False,
                 configured: bool = True):
        self.records = records or {}
        self.fail = fail
        self.configured = configured
        self.calls: List[str] = []

    def lookup_one(self, mpn):
        self.calls.append(mpn)
        if self.fail:
            raise ProviderError("Parts database returned HTTP 503")
        return self.records.get(mpn)


class FakeGenerator:
    def __init__(self, markdown: str = "# Alternatives\n\nNo alternatives found.", error: Optional[str] = None):
        self.markdown = markdown
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise GenerationError(self.error)
        return self.markdown


@pytest.fixture
def settings():
    return Settings(
        openai_api_key="test-openai-key",
        google_api_key="test-google-key",
        google_cx="test-cx",
        request_timeout=5.0,
        datasheet_max_chars=100,
    )


@pytest.fixture
def make_aggregator(settings):
    def _make(search=None, distributor=None, datasheet=None, parts_db=None, **overrides):
        config = replace(settings, **overrides) if overrides else settings
        return ContextAggregator(
            config,
            search=search or StubSearch(),
            distributor=distributor or StubDistributor(),
            datasheet=datasheet or StubDatasheet(),
            parts_db=parts_db,
        )
    return _make


@pytest.fixture
def make_finder(settings, make_aggregator):
    def _make(generator=None, generator_factory=None, finder_settings=None, **adapters):
        config = finder_settings or settings
        aggregator = make_aggregator(**adapters)
        if generator_factory is None:
            generator = generator or FakeGenerator()
            generator_factory = lambda _settings: generator
        return PartFinderService(config, aggregator, generator_factory=generator_factory)
    return _make


def build_pdf(text: str) -> bytes:
    """Build a one-page PDF showing `text` in Helvetica."""
    stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"
    xref_at = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode()
    return bytes(out)
