"""
Data records passed between the search, extraction, aggregation and prompt stages
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

# Sentinel for a requested field the source did not provide
NOT_FOUND = "N/A"


class TemplateKind(str, Enum):
    ALTERNATIVES = "alternatives"
    COMPARISON = "comparison"


class ContextSource(str, Enum):
    WEB_SEARCH = "web-search"
    PARTS_DATABASE = "parts-database"


@dataclass
class SearchResult:
    """One ranked hit from the search provider."""

    title: str
    link: str
    snippet: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "link": self.link, "snippet": self.snippet}


@dataclass
class DistributorFieldSet:
    """Named fields scraped from one distributor product page."""

    source_url: str
    fields: Dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return all(value == NOT_FOUND for value in self.fields.values())

    @property
    def package_type(self) -> str:
        return self.fields.get("Package / Case", NOT_FOUND)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.source_url,
            "packageType": self.package_type,
            "fields": dict(self.fields),
        }


@dataclass
class DatasheetExcerpt:
    source_url: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.source_url, "text": self.text}


@dataclass
class PartRecord:
    """Structured attributes for one part from the parts database."""

    mpn: str
    manufacturer: str = "Unknown"
    specs: Dict[str, str] = field(default_factory=dict)
    datasheet_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mpn": self.mpn,
            "manufacturer": self.manufacturer,
            "specs": [{"name": name, "value": value} for name, value in self.specs.items()],
            "datasheetUrl": self.datasheet_url,
        }


@dataclass
class SpecComparison:
    similarities: List[Dict[str, str]] = field(default_factory=list)
    differences: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "similarities": [dict(item) for item in self.similarities],
            "differences": [dict(item) for item in self.differences],
        }


@dataclass
class PartContext:
    """
    Everything gathered for one part query.

    `unavailable` names the sources that failed or returned nothing, so the
    prompt can say the data could not be confirmed.
    """

    part_number: str
    source: ContextSource = ContextSource.WEB_SEARCH
    search_results: List[SearchResult] = field(default_factory=list)
    distributor_fields: List[DistributorFieldSet] = field(default_factory=list)
    datasheet_results: List[SearchResult] = field(default_factory=list)
    datasheets: List[DatasheetExcerpt] = field(default_factory=list)
    part_record: Optional[PartRecord] = None
    unavailable: List[str] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return bool(
            self.search_results
            or self.distributor_fields
            or self.datasheets
            or self.part_record
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "partNumber": self.part_number,
            "source": self.source.value,
            "searchResults": [result.to_dict() for result in self.search_results],
            "distributorFields": [fields.to_dict() for fields in self.distributor_fields],
            "datasheetResults": [result.to_dict() for result in self.datasheet_results],
            "datasheets": [excerpt.to_dict() for excerpt in self.datasheets],
            "partRecord": self.part_record.to_dict() if self.part_record else None,
            "unavailable": list(self.unavailable),
        }


@dataclass
class AggregatedContext:
    """
    Context for one request. `parts` is in request order (index 0 is the
    single part or partA, index 1 is partB), so identical part numbers still
    get independent entries.
    """

    kind: TemplateKind
    parts: List[PartContext] = field(default_factory=list)
    comparison: Optional[SpecComparison] = None

    def part(self, index: int) -> PartContext:
        return self.parts[index]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "parts": [context.to_dict() for context in self.parts],
            "comparison": self.comparison.to_dict() if self.comparison else None,
        }


@dataclass
class Prompt:
    """Role messages and output bounds handed to the generation client."""

    system: str
    user: str
    max_tokens: int
    temperature: Optional[float] = None

    def __str__(self) -> str:
        return self.user


@dataclass
class GeneratedAnswer:
    markdown: str
    html: str
