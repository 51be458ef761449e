from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from saborlocal.cms import groq
from saborlocal.content import admin
from saborlocal.content.admin import AdminError, NotFoundError
from saborlocal.content.models import CityIn, PostIn, ReviewIn, VenueIn


def _client(existing: dict | None = None, slug_taken: bool = False, references: int = 0) -> MagicMock:
    """A CMS stub answering the admin lookups by query."""

    def fetch(query, params=None):
        if query == groq.ADMIN_DOCUMENT_BY_ID_QUERY:
            return existing
        if query == groq.SLUG_TAKEN_QUERY:
            return slug_taken
        if query == groq.REFERENCING_COUNT_QUERY:
            return references
        return []

    client = MagicMock()
    client.fetch.side_effect = fetch
    client.create.side_effect = lambda doc: {"_id": "new-id", **doc}
    client.patch.side_effect = lambda doc_id, set=None: {"_id": doc_id, **(set or {})}
    return client


def test_create_city_generates_slug():
    client = _client()

    created = admin.create_document(client, "city", CityIn(title="A Coruña", region="Galicia"))

    doc = client.create.call_args[0][0]
    assert doc["_type"] == "city"
    assert doc["slug"] == {"_type": "slug", "current": "a-coruna"}
    assert doc["region"] == "Galicia"
    assert created["_id"] == "new-id"


def test_explicit_slug_is_normalised():
    client = _client()
    admin.create_document(client, "city", CityIn(title="Madrid", slug="Madrid Centro"))
    assert client.create.call_args[0][0]["slug"]["current"] == "madrid-centro"


def test_duplicate_slug_is_refused():
    client = _client(slug_taken=True)

    with pytest.raises(AdminError) as excinfo:
        admin.create_document(client, "city", CityIn(title="Madrid"))

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Ya existe un elemento con este slug"
    client.create.assert_not_called()


def test_update_excludes_own_id_from_slug_check():
    client = _client(existing={"_id": "city-1", "_type": "city"})

    admin.update_document(client, "city", "city-1", CityIn(title="Sevilla", slug="Sevilla"))

    slug_call = [c for c in client.fetch.call_args_list if c[0][0] == groq.SLUG_TAKEN_QUERY][0]
    assert slug_call[0][1] == {"type": "city", "slug": "sevilla", "excludeId": "city-1"}
    assert client.patch.call_args[1]["set"]["slug"]["current"] == "sevilla"


def test_update_without_slug_keeps_existing_slug_and_fields():
    client = _client(existing={"_id": "city-1", "_type": "city", "slug": "madrid"})

    admin.update_document(client, "city", "city-1", CityIn(title="Madrid Centro"))

    assert client.patch.call_args[1]["set"] == {"title": "Madrid Centro"}
    queries = [c[0][0] for c in client.fetch.call_args_list]
    assert groq.SLUG_TAKEN_QUERY not in queries


def test_update_with_taken_slug_is_refused():
    client = _client(existing={"_id": "city-1", "_type": "city"}, slug_taken=True)

    with pytest.raises(AdminError) as excinfo:
        admin.update_document(client, "city", "city-1", CityIn(title="Madrid", slug="sevilla"))

    assert excinfo.value.message == "Ya existe un elemento con este slug"
    client.patch.assert_not_called()


def test_update_venue_maps_sent_fields_to_document_keys():
    client = _client(existing={"_id": "venue-1", "_type": "venue"})
    body = VenueIn(title="Casa Lucio", address="Cava Baja 35", city_id="city-madrid", lat=40.41, lng=-3.70)

    admin.update_document(client, "venue", "venue-1", body)

    assert client.patch.call_args[1]["set"] == {
        "title": "Casa Lucio",
        "address": "Cava Baja 35",
        "city": {"_type": "reference", "_ref": "city-madrid"},
        "geo": {"_type": "geopoint", "lat": 40.41, "lng": -3.70},
    }


def test_update_missing_document_is_not_found():
    client = _client(existing=None)

    with pytest.raises(NotFoundError) as excinfo:
        admin.update_document(client, "city", "city-x", CityIn(title="Sevilla"))

    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Ciudad no encontrada"


def test_delete_city_with_venues_is_refused():
    client = _client(existing={"_id": "city-1"}, references=3)

    with pytest.raises(AdminError) as excinfo:
        admin.delete_document(client, "city", "city-1")

    assert "locales asociados" in excinfo.value.message
    client.delete.assert_not_called()


def test_delete_post_is_never_blocked():
    client = _client(existing={"_id": "post-1"}, references=5)

    admin.delete_document(client, "post", "post-1")

    client.delete.assert_called_once_with("post-1")


def test_venue_fields_are_validated_and_referenced():
    client = _client()
    body = VenueIn(
        title="Casa Lucio",
        address="Cava Baja 35",
        city_id="city-madrid",
        category_ids=["category-castiza", "category-tapas"],
        phone="913 653 252",
        website="https://casalucio.es",
        lat=40.41,
        lng=-3.70,
    )

    admin.create_document(client, "venue", body)

    doc = client.create.call_args[0][0]
    assert doc["priceRange"] == "€€"
    assert doc["phone"] == "913 653 252"
    assert doc["city"] == {"_type": "reference", "_ref": "city-madrid"}
    assert doc["categories"][1] == {"_key": "k1", "_type": "reference", "_ref": "category-tapas"}
    assert doc["geo"] == {"_type": "geopoint", "lat": 40.41, "lng": -3.70}


def test_venue_with_bad_phone_is_refused():
    with pytest.raises(AdminError) as excinfo:
        admin.create_document(_client(), "venue", VenueIn(title="X", address="Y", phone="123"))
    assert excinfo.value.status_code == 400


def test_venue_with_bad_website_is_refused():
    with pytest.raises(AdminError) as excinfo:
        admin.create_document(_client(), "venue", VenueIn(title="X", address="Y", website="casalucio.es"))
    assert excinfo.value.message == "La URL debe comenzar con http:// o https://"


def test_review_document_shape():
    client = _client()
    body = ReviewIn(
        title="Huevos rotos",
        venue_id="venue-1",
        ratings={"food": 9, "service": 8, "ambience": 8, "value": 7},
        faq=[{"question": "¿Reservar?", "answer": "Sí"}],
    )

    admin.create_document(client, "review", body)

    doc = client.create.call_args[0][0]
    assert doc["venue"] == {"_type": "reference", "_ref": "venue-1"}
    assert doc["ratings"] == {"food": 9.0, "service": 8.0, "ambience": 8.0, "value": 7.0}
    assert doc["faq"] == [{"_key": "k0", "question": "¿Reservar?", "answer": "Sí"}]


@patch("saborlocal.content.admin.revalidate_tag")
def test_writes_revalidate_type_and_document_tags(mock_revalidate):
    client = _client()
    admin.create_document(client, "review", ReviewIn(
        title="R", venue_id="venue-1", ratings={"food": 1, "service": 1, "ambience": 1, "value": 1},
    ))

    tags = [c[0][0] for c in mock_revalidate.call_args_list]
    assert tags == ["review", "review-new-id", "venue"]


def test_unknown_type_is_refused():
    with pytest.raises(AdminError) as excinfo:
        admin.list_documents(_client(), "recipe")
    assert excinfo.value.status_code == 400


def test_list_documents_uses_type_query():
    client = _client()
    admin.list_documents(client, "post")
    assert client.fetch.call_args[0][0] == groq.ADMIN_POSTS_QUERY


def test_post_without_title_slug_is_refused():
    with pytest.raises(AdminError):
        admin.create_document(_client(), "post", PostIn(title="¡¡!!"))
