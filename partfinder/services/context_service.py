"""
Context Service - Gather search, distributor, datasheet and parts-database data
for one or two part numbers into a single AggregatedContext.

Every adapter call is isolated: a failure only empties that part of the context
and is recorded in PartContext.unavailable. aggregate() does not raise for
adapter failures.
"""
import concurrent.futures
import logging
from typing import Callable, List, Optional, Sequence, TypeVar

from partfinder.errors import ProviderError
from partfinder.models import (
    AggregatedContext,
    ContextSource,
    DatasheetExcerpt,
    DistributorFieldSet,
    PartContext,
    SearchResult,
    TemplateKind,
)
from partfinder.services.datasheet_service import DatasheetExtractor
from partfinder.services.distributor_service import DistributorExtractor
from partfinder.services.parts_db_service import PartsDatabaseService, compare_specs
from partfinder.services.search_service import SearchService
from partfinder.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class ContextAggregator:
    def __init__(
        self,
        settings: Settings,
        search: SearchService,
        distributor: DistributorExtractor,
        datasheet: DatasheetExtractor,
        parts_db: Optional[PartsDatabaseService] = None,
    ):
        self.search = search
        self.distributor = distributor
        self.datasheet = datasheet
        self.parts_db = parts_db
        self.enrichment_mode = settings.enrichment_mode
        self.datasheet_enrichment = settings.datasheet_enrichment
        self.datasheet_max_chars = settings.datasheet_max_chars
        self.distributor_fields = tuple(settings.distributor_fields)
        self.max_results = settings.search_max_results

    def aggregate(self, parts: Sequence[str], kind: TemplateKind) -> AggregatedContext:
        """
        Build the context for a request.

        Args:
            parts: One part number (alternatives) or two (comparison)
            kind: Which template the context is for

        Returns:
            AggregatedContext with one PartContext per input, in input order
        """
        if len(parts) not in (1, 2):
            raise ValueError("aggregate() takes one or two part numbers")

        if len(parts) == 1:
            contexts = [self._gather_part(parts[0], kind)]
        else:
            # Sides are independent; run them concurrently and wait for both
            with concurrent.futures.ThreadPoolExecutor(max_workers=len(parts)) as executor:
                contexts = list(executor.map(lambda part: self._gather_part(part, kind), parts))

        context = AggregatedContext(kind=kind, parts=contexts)
        if kind == TemplateKind.COMPARISON and len(contexts) == 2:
            record_a, record_b = contexts[0].part_record, contexts[1].part_record
            if record_a and record_b:
                context.comparison = compare_specs(record_a, record_b)
        return context

    def aggregate_alternatives(self, part_number: str) -> AggregatedContext:
        return self.aggregate([part_number], TemplateKind.ALTERNATIVES)

    def aggregate_comparison(self, part_a: str, part_b: str) -> AggregatedContext:
        return self.aggregate([part_a, part_b], TemplateKind.COMPARISON)

    # ---- per part ----

    def _gather_part(self, part_number: str, kind: TemplateKind) -> PartContext:
        context = PartContext(part_number=part_number)

        if kind == TemplateKind.COMPARISON and self.parts_db is not None and self.parts_db.configured:
            if self._gather_from_parts_db(context):
                return context

        self._gather_from_web(context)
        return context

    def _gather_from_parts_db(self, context: PartContext) -> bool:
        record = self._safe_call(
            lambda: self.parts_db.lookup_one(context.part_number),
            None,
            "parts database lookup",
            context.part_number,
        )
        if record is None:
            context.unavailable.append("parts-database")
            logger.info("No parts database record for %s, falling back to web search", context.part_number)
            return False

        context.source = ContextSource.PARTS_DATABASE
        context.part_record = record
        if self.datasheet_enrichment and record.datasheet_url:
            excerpt = self._extract_datasheet(record.datasheet_url)
            if excerpt:
                context.datasheets.append(excerpt)
            else:
                context.unavailable.append("datasheet")
        return True

    def _gather_from_web(self, context: PartContext) -> None:
        context.source = ContextSource.WEB_SEARCH
        part_number = context.part_number

        context.search_results = self._safe_call(
            lambda: self.search.search_distributors(part_number, self.max_results),
            [],
            "distributor search",
            part_number,
        )
        if not context.search_results:
            context.unavailable.append("distributor-search")
        else:
            context.distributor_fields = self._collect(
                context.search_results, self._extract_distributor
            )
            if not context.distributor_fields:
                context.unavailable.append("distributor-pages")

        if not self.datasheet_enrichment:
            return

        context.datasheet_results = self._safe_call(
            lambda: self.search.search_datasheets(part_number, self.max_results),
            [],
            "datasheet search",
            part_number,
        )
        if not context.datasheet_results:
            context.unavailable.append("datasheet-search")
            return

        context.datasheets = self._collect(context.datasheet_results, self._extract_datasheet)
        if not context.datasheets:
            context.unavailable.append("datasheet")

    # ---- candidate selection ----

    def _collect(self, candidates: List[SearchResult], extract: Callable[[str], Optional[R]]) -> List[R]:
        """
        Run `extract` over candidate links.

        In "first" mode the scan stops at the first candidate that yields data.
        In "all" mode every candidate is extracted concurrently and the results
        keep candidate order.
        """
        links = [candidate.link for candidate in candidates]
        if self.enrichment_mode == "all" and len(links) > 1:
            with concurrent.futures.ThreadPoolExecutor(max_workers=min(len(links), 5)) as executor:
                extracted = list(executor.map(extract, links))
            return [item for item in extracted if item]

        for link in links:
            item = extract(link)
            if item:
                return [item]
        return []

    def _extract_distributor(self, url: str) -> Optional[DistributorFieldSet]:
        field_set = self._safe_call(
            lambda: self.distributor.extract(url, self.distributor_fields),
            None,
            "distributor extraction",
            url,
        )
        if field_set is None or field_set.is_empty:
            return None
        return field_set

    def _extract_datasheet(self, url: str) -> Optional[DatasheetExcerpt]:
        text = self._safe_call(
            lambda: self.datasheet.extract(url, self.datasheet_max_chars),
            "",
            "datasheet extraction",
            url,
        )
        if not text:
            return None
        return DatasheetExcerpt(source_url=url, text=text[:self.datasheet_max_chars])

    @staticmethod
    def _safe_call(call: Callable[[], T], default: T, what: str, subject: str) -> T:
        try:
            return call()
        except ProviderError as e:
            logger.warning("%s failed for %s: %s", what.capitalize(), subject, e.message)
        except Exception as e:
            logger.warning("%s failed for %s: %s", what.capitalize(), subject, e, exc_info=True)
        return default
