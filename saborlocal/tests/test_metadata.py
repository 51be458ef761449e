from __future__ import annotations

from saborlocal.content.models import City, Review, SanityImage, Venue
from saborlocal.seo import metadata
from saborlocal.seo.site import SiteConfig

SITE = SiteConfig(name="SaborLocal", url="https://saborlocal.es")

MADRID = {"_id": "city-madrid", "title": "Madrid", "slug": "madrid", "region": "Comunidad de Madrid"}


def _venue(**fields) -> Venue:
    return Venue.model_validate({
        "title": "Casa Lucio",
        "slug": "casa-lucio-madrid",
        "city": MADRID,
        "priceRange": "€€€",
        "geo": {"lat": 40.41, "lng": -3.7},
        "categories": [{"title": "Castiza", "slug": "castiza"}],
        **fields,
    })


def test_optimize_description_cuts_at_word_boundary():
    text = "palabra " * 40
    result = metadata.optimize_description(text)
    assert len(result) <= 163
    assert result.endswith("palabra...")


def test_optimize_description_collapses_whitespace():
    assert metadata.optimize_description("  Muy\n\n buen   sitio ") == "Muy buen sitio"
    assert metadata.optimize_description(None) == ""


def test_optimize_description_without_spaces():
    assert metadata.optimize_description("x" * 200, max_length=10) == "xxxxxxx..."


def test_optimize_title():
    long_title = "Los mejores restaurantes de cocina tradicional castellana en Madrid centro"
    result = metadata.optimize_title(long_title)
    assert len(result) <= 60
    assert not result.endswith(" ")
    assert long_title.startswith(result)
    assert metadata.optimize_title("Corto") == "Corto"


def test_rating_label_thresholds():
    assert metadata.rating_label(8) == "Excelente"
    assert metadata.rating_label(7.9) == "Muy bueno"
    assert metadata.rating_label(4) == "Bueno"
    assert metadata.rating_label(3.9) == "Regular"


def test_canonical_url_adds_slash():
    assert metadata.generate_canonical_url("blog", SITE) == "https://saborlocal.es/blog"


def test_venue_metadata():
    meta = metadata.venue_metadata(_venue(), SITE)

    assert meta["title"] == "Casa Lucio en Madrid - Reseña completa"
    assert meta["canonical"] == "https://saborlocal.es/madrid/casa-lucio"
    assert len(meta["description"]) <= 160
    tags = {t["name"]: t["content"] for t in meta["additionalMetaTags"]}
    assert tags["geo.placename"] == "Madrid, Comunidad de Madrid"
    assert tags["geo.position"] == "40.41;-3.7"
    assert "Castiza" in tags["keywords"]


def test_review_metadata_uses_average_rating():
    venue = _venue()
    review = Review.model_validate({
        "title": "Huevos rotos",
        "slug": "huevos-rotos",
        "tldr": "Los mejores huevos rotos de Madrid.",
        "author": "Ana",
        "ratings": {"food": 9, "service": 8, "ambience": 8, "value": 7},
    })

    meta = metadata.review_metadata(review, venue, SITE)

    assert meta["title"] == "Casa Lucio - Reseña Excelente (8/10) | Madrid"
    assert meta["canonical"] == "https://saborlocal.es/madrid/casa-lucio/review/huevos-rotos"
    assert meta["openGraph"]["type"] == "article"
    assert meta["openGraph"]["article"]["authors"] == ["Ana"]


def test_city_metadata_mentions_count():
    meta = metadata.city_metadata(City.model_validate(MADRID), 12, SITE)
    assert "12 mejores restaurantes" in meta["description"]
    assert meta["canonical"] == "https://saborlocal.es/madrid"


def test_category_metadata_with_and_without_city():
    plain = metadata.category_metadata("Comida Japonesa", site=SITE)
    assert plain["canonical"] == "https://saborlocal.es/categorias/comida-japonesa"

    local = metadata.category_metadata("Tapas", "sevilla", SITE)
    assert local["title"] == "Tapas en sevilla - Mejores opciones"
    assert local["canonical"] == "https://saborlocal.es/sevilla/categoria/tapas"


def test_page_metadata_optional_article_tags():
    meta = metadata.page_metadata(
        "Título", "Desc", "https://saborlocal.es/x", published_time="2024-01-01", author="Ana", site=SITE
    )
    names = [t.get("property") or t.get("name") for t in meta["additionalMetaTags"]]
    assert "article:published_time" in names
    assert "author" in names
    assert meta["openGraph"]["images"][0]["url"] == "https://saborlocal.es/og-default.jpg"
    assert meta["twitter"]["site"] == SITE.twitter_handle


def test_generate_keywords_dedupes():
    venue = _venue()
    keywords = metadata.generate_keywords(venue=venue, city=venue.city, custom=["Castiza", "Madrid"])
    assert keywords.count("madrid") == 1
    assert keywords.count("castiza") == 1
    assert keywords[0] == "restaurante"


def test_sanity_image_to_seo():
    image = SanityImage.model_validate({"asset": {"url": "https://cdn.sanity.io/images/x/production/sala.jpg"}, "alt": "Sala"})

    assert metadata.sanity_image_to_seo(image) == {
        "url": "https://cdn.sanity.io/images/x/production/sala.jpg",
        "width": 1200,
        "height": 630,
        "alt": "Sala",
    }
    assert metadata.sanity_image_to_seo(image, alt="Comedor", width=800, height=600)["alt"] == "Comedor"


def test_sanity_image_to_seo_without_asset():
    seo = metadata.sanity_image_to_seo(SanityImage())
    assert seo["url"] is None
    assert seo["alt"] == "Imagen"


def test_generate_image_sizes():
    image = SanityImage.model_validate({"asset": {"url": "https://cdn.sanity.io/images/x/production/sala.jpg"}})

    sizes = metadata.generate_image_sizes(image, alt="Sala")

    assert [(s["width"], s["height"]) for s in sizes] == [(1200, 630), (800, 600), (400, 300)]
    assert sizes[0]["url"] == "https://cdn.sanity.io/images/x/production/sala.jpg?w=1200&h=630&fit=crop&auto=format"
    assert {s["alt"] for s in sizes} == {"Sala"}


def test_generate_image_sizes_without_asset_is_empty():
    assert metadata.generate_image_sizes(SanityImage(alt="Sala")) == []
