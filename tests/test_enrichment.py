from types import SimpleNamespace

import requests

from app.core.settings import Settings
from app.services.enrichment_service import AddressEnrichmentService
from app.services.geocoding import GeocodeCache, NoOpProvider, build_geocoding_provider, cache_key
from app.services.geocoding.nominatim_provider import NominatimProvider
from app.services.geocoding.opencage_provider import OpenCageProvider

from tests.conftest import StubGeocoder


def make_service(provider):
    return AddressEnrichmentService(provider=provider, cache=GeocodeCache(), default_language="ar")


def test_cache_key_rounds_to_five_decimals():
    assert cache_key(36.2, 37.1) == "36.20000,37.10000"
    assert cache_key(36.2000001, 37.1000004) == cache_key(36.2, 37.1)


def test_nearby_coordinates_share_one_provider_call():
    provider = StubGeocoder()
    service = make_service(provider)

    first = service.resolve(36.2000001, 37.1000001)
    second = service.resolve(36.2000004, 37.1000002)

    assert first == second == "Aleppo, Syria"
    assert len(provider.calls) == 1


def test_failures_are_cached_too():
    provider = StubGeocoder(error="quota exceeded")
    service = make_service(provider)

    assert service.resolve(1.0, 2.0) is None
    assert service.resolve(1.0, 2.0) is None
    assert len(provider.calls) == 1


def test_raising_provider_degrades_to_no_address():
    provider = StubGeocoder(raises=True)
    service = make_service(provider)

    assert service.resolve(1.0, 2.0) is None


def test_unconfigured_provider_is_never_called_and_not_cached():
    provider = StubGeocoder(is_configured=False)
    service = make_service(provider)

    assert service.resolve(1.0, 2.0) is None
    assert provider.calls == []
    assert len(service.cache) == 0


def test_default_language_is_passed_to_provider():
    provider = StubGeocoder()
    make_service(provider).resolve(1.0, 2.0)

    assert provider.calls == [(1.0, 2.0, "ar")]


def test_enrich_location_keeps_existing_address():
    provider = StubGeocoder()
    service = make_service(provider)

    location = service.enrich_location({"latitude": 1.0, "longitude": 2.0, "address": "Known"})

    assert location["address"] == "Known"
    assert provider.calls == []


def test_enrich_location_fills_blank_address():
    service = make_service(StubGeocoder())

    location = service.enrich_location({"latitude": 1.0, "longitude": 2.0, "address": "   "})

    assert location == {"latitude": 1.0, "longitude": 2.0, "address": "Aleppo, Syria"}


def test_provider_selection():
    assert isinstance(build_geocoding_provider(Settings(GEOCODING_PROVIDER="none")), NoOpProvider)
    assert isinstance(build_geocoding_provider(Settings(GEOCODING_PROVIDER="nominatim")), NominatimProvider)

    default = build_geocoding_provider(Settings(GEOCODING_PROVIDER="opencage", GEOPROXY_KEY="k"))
    assert isinstance(default, OpenCageProvider)
    assert default.configured

    fallback = build_geocoding_provider(Settings(GEOCODING_PROVIDER="mystery", GEOPROXY_KEY=None))
    assert isinstance(fallback, OpenCageProvider)
    assert not fallback.configured


def test_opencage_parses_first_result(monkeypatch):
    captured = {}

    def fake_get(url, params=None, timeout=None):
        captured.update(url=url, params=params, timeout=timeout)
        return SimpleNamespace(
            status_code=200,
            json=lambda: {"status": {"code": 200}, "results": [{"formatted": "Aleppo, Syria"}]},
        )

    monkeypatch.setattr(requests, "get", fake_get)

    result = OpenCageProvider(api_key="secret", timeout=3.0).reverse_geocode(36.2, 37.1, "en")

    assert result == {"formatted_address": "Aleppo, Syria", "error": None, "provider": "opencage"}
    assert captured["url"] == OpenCageProvider.BASE_URL
    assert captured["params"]["key"] == "secret"
    assert captured["params"]["no_annotations"] == 1
    assert captured["timeout"] == 3.0


def test_opencage_never_raises(monkeypatch):
    def fake_get(url, params=None, timeout=None):
        raise requests.Timeout("too slow")

    monkeypatch.setattr(requests, "get", fake_get)

    result = OpenCageProvider(api_key="secret").reverse_geocode(1.0, 2.0)

    assert result["formatted_address"] is None
    assert "too slow" in result["error"]


def test_opencage_without_key_makes_no_request(monkeypatch):
    def fake_get(*args, **kwargs):
        raise AssertionError("request should not be made")

    monkeypatch.setattr(requests, "get", fake_get)

    result = OpenCageProvider(api_key=None).reverse_geocode(1.0, 2.0)

    assert result["formatted_address"] is None


def test_nominatim_sends_user_agent_and_language(monkeypatch):
    captured = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        captured.update(params=params, headers=headers)
        return SimpleNamespace(status_code=200, json=lambda: {"display_name": "Homs, Syria"})

    monkeypatch.setattr(requests, "get", fake_get)

    result = NominatimProvider(user_agent="reports-test/1.0").reverse_geocode(34.7, 36.7, "ar")

    assert result["formatted_address"] == "Homs, Syria"
    assert captured["headers"]["User-Agent"] == "reports-test/1.0"
    assert captured["params"]["accept-language"] == "ar"
