import pytest
import requests

from conftest import FakeResponse, FakeSession
from partfinder.errors import ProviderError
from partfinder.services.search_service import (
    GOOGLE_SEARCH_URL,
    SearchService,
    build_datasheet_query,
    build_site_query,
    link_matches_domain,
)
from partfinder.settings import Settings


def google_items(*links):
    return {"items": [{"title": f"Result {i}", "link": link, "snippet": f"snippet {i}"}
                      for i, link in enumerate(links, 1)]}


def test_build_site_query_single_and_multiple_domains():
    assert build_site_query("LM317", ["digikey.com"]) == "LM317 site:digikey.com"
    assert build_site_query("LM317", ["digikey.com", "mouser.com"]) == "LM317 site:digikey.com OR site:mouser.com"
    assert build_site_query("LM317", []) == "LM317"


def test_build_datasheet_query():
    assert build_datasheet_query("NE555") == "NE555 datasheet filetype:pdf"


def test_link_matches_domain_accepts_subdomains_only():
    assert link_matches_domain("https://www.digikey.com/en/products/detail/x", ["digikey.com"])
    assert link_matches_domain("https://digikey.com/x", ["digikey.com"])
    assert not link_matches_domain("https://notdigikey.com/x", ["digikey.com"])
    assert not link_matches_domain("https://example.com/digikey.com", ["digikey.com"])


def test_search_sends_restricted_query_and_filters_domains(settings):
    session = FakeSession(lambda method, url, kwargs: FakeResponse(200, google_items(
        "https://www.digikey.com/p/1",
        "https://forum.example.com/lm317",
        "https://www.digikey.com/p/2",
    )))
    service = SearchService(settings, session=session)

    results = service.search_distributors("LM317")

    assert [r.link for r in results] == ["https://www.digikey.com/p/1", "https://www.digikey.com/p/2"]
    assert results[0].title == "Result 1"
    call = session.calls[0]
    assert call["url"] == GOOGLE_SEARCH_URL
    assert call["params"]["q"] == "LM317 site:digikey.com"
    assert call["params"]["key"] == "test-google-key"
    assert call["params"]["cx"] == "test-cx"
    assert call["timeout"] == 5.0


def test_search_truncates_to_max_results(settings):
    links = [f"https://www.digikey.com/p/{i}" for i in range(8)]
    session = FakeSession(lambda method, url, kwargs: FakeResponse(200, google_items(*links)))
    service = SearchService(settings, session=session)

    results = service.search("LM317 site:digikey.com", ["digikey.com"], max_results=3)

    assert [r.link for r in results] == links[:3]
    assert session.calls[0]["params"]["num"] == 10


def test_unfiltered_search_asks_for_the_cap_only(settings):
    session = FakeSession(lambda method, url, kwargs: FakeResponse(200, google_items()))
    SearchService(settings, session=session).search("LM317", max_results=3)
    assert session.calls[0]["params"]["num"] == 3


def test_search_without_items_returns_empty_list(settings):
    session = FakeSession(lambda method, url, kwargs: FakeResponse(200, {"searchInformation": {}}))
    assert SearchService(settings, session=session).search("nothing") == []


def test_search_non_success_status_raises_provider_error(settings):
    session = FakeSession(lambda method, url, kwargs: FakeResponse(403, {"error": {"message": "quota"}}))
    with pytest.raises(ProviderError) as exc:
        SearchService(settings, session=session).search_distributors("LM317")
    assert "403" in exc.value.message


def test_search_network_error_raises_provider_error(settings):
    def handler(method, url, kwargs):
        raise requests.ConnectionError("connection refused")

    with pytest.raises(ProviderError):
        SearchService(settings, session=FakeSession(handler)).search("LM317")


def test_search_without_credentials_raises_before_any_request():
    session = FakeSession(lambda method, url, kwargs: FakeResponse(200, google_items()))
    service = SearchService(Settings(), session=session)

    with pytest.raises(ProviderError):
        service.search("LM317")
    assert session.calls == []


def test_datasheet_search_keeps_pdf_links_only(settings):
    session = FakeSession(lambda method, url, kwargs: FakeResponse(200, google_items(
        "https://www.ti.com/lit/ds/symlink/lm317.pdf",
        "https://www.ti.com/product/LM317",
        "https://www.onsemi.com/pdf/datasheet/lm317-d.PDF",
    )))
    results = SearchService(settings, session=session).search_datasheets("LM317")

    assert [r.link for r in results] == [
        "https://www.ti.com/lit/ds/symlink/lm317.pdf",
        "https://www.onsemi.com/pdf/datasheet/lm317-d.PDF",
    ]
    assert session.calls[0]["params"]["q"] == "LM317 datasheet filetype:pdf"


def test_datasheet_cap_counts_pdf_links_only(settings):
    session = FakeSession(lambda method, url, kwargs: FakeResponse(200, google_items(
        "https://www.ti.com/product/LM317",
        "https://www.ti.com/lit/ds/symlink/lm317.pdf",
        "https://www.mouser.com/c/lm317",
        "https://www.onsemi.com/pdf/datasheet/lm317-d.pdf",
        "https://www.st.com/resource/en/datasheet/lm317.pdf",
    )))

    results = SearchService(settings, session=session).search_datasheets("LM317", max_results=2)

    assert [r.link for r in results] == [
        "https://www.ti.com/lit/ds/symlink/lm317.pdf",
        "https://www.onsemi.com/pdf/datasheet/lm317-d.pdf",
    ]
    assert session.calls[0]["params"]["num"] == 10
