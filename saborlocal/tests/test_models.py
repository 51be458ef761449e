from __future__ import annotations

import pytest
from pydantic import ValidationError

from saborlocal.content.models import FeaturedItem, FeaturedType, Review, Venue, VenueIn


def test_venue_parses_groq_projection():
    venue = Venue.model_validate({
        "_id": "venue-1",
        "title": "Casa Lucio",
        "slug": {"_type": "slug", "current": "casa-lucio"},
        "postalCode": "28005",
        "openingHours": "Lunes-Viernes 13:00-16:00\n\nSábado 13:00-23:30",
        "priceRange": "€€€",
        "city": {"_id": "city-madrid", "title": "Madrid", "slug": "madrid"},
        "images": {"asset": {"_id": "image-a-1x1-jpg"}},
        "categories": [None, {"title": "Castiza", "slug": "castiza"}],
        "social": {"instagram": "@casalucio", "facebook": None, "x": 3},
        "description": None,
    })

    assert venue.id == "venue-1"
    assert venue.slug == "casa-lucio"
    assert venue.postal_code == "28005"
    assert venue.opening_hours == ["Lunes-Viernes 13:00-16:00", "Sábado 13:00-23:30"]
    assert venue.city.slug == "madrid"
    assert len(venue.images) == 1
    assert [c.slug for c in venue.categories] == ["castiza"]
    assert venue.social == {"instagram": "@casalucio"}
    assert venue.description is None


def test_venue_rejects_unknown_price_range():
    with pytest.raises(ValidationError):
        Venue.model_validate({"title": "X", "priceRange": "cheap"})


def test_review_overall_rating():
    review = Review.model_validate({"title": "R", "ratings": {"food": 9, "service": 8, "ambience": 7, "value": 8}})
    assert review.ratings.overall == 8.0


def test_review_serialises_camel_case():
    review = Review.model_validate({"_id": "r1", "title": "R", "publishedAt": "2024-03-01T10:00:00Z"})
    dumped = review.model_dump(by_alias=True, exclude_none=True)
    assert dumped["_id"] == "r1"
    assert dumped["publishedAt"] == "2024-03-01T10:00:00Z"


def test_featured_item_reference_matches_type():
    item = FeaturedItem.model_validate({
        "_id": "f1",
        "title": "Lucio",
        "type": "venue",
        "customCTA": "Reservar",
        "venueRef": {"title": "Casa Lucio"},
        "reviewRef": None,
    })
    assert item.type is FeaturedType.venue
    assert item.custom_cta == "Reservar"
    assert item.reference == {"title": "Casa Lucio"}


def test_venue_in_defaults_and_requirements():
    body = VenueIn(title="Casa Lucio", address="Cava Baja 35")
    assert body.price_range == "€€"
    assert body.schema_type == "Restaurant"

    with pytest.raises(ValidationError):
        VenueIn(title="Casa Lucio", address="")
    with pytest.raises(ValidationError):
        VenueIn(title="Casa Lucio", address="Cava Baja 35", lat=120)
