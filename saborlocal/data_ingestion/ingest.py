from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List

import pandas as pd

from ..cms import groq
from ..cms.client import SanityClient, get_write_client
from ..content.urls import slugify
from .config import DEFAULT_IMPORT_CONFIG, ImportConfig

logger = logging.getLogger(__name__)

PRICE_RANGES = ("€", "€€", "€€€", "€€€€")

VENUE_COLUMNS: List[str] = [
    "title",
    "slug",
    "city_slug",
    "address",
    "postal_code",
    "phone",
    "website",
    "lat",
    "lng",
    "opening_hours",
    "price_range",
    "avg_price_per_person",
    "category_slugs",
    "description",
    "social",
]

# Accepted spellings for each canonical venue column
COLUMN_ALIASES = {
    "name": "title",
    "nombre": "title",
    "city": "city_slug",
    "ciudad": "city_slug",
    "address_line": "address",
    "direccion": "address",
    "postalCode": "postal_code",
    "codigo_postal": "postal_code",
    "telefono": "phone",
    "web": "website",
    "url": "website",
    "latitude": "lat",
    "longitude": "lng",
    "openingHours": "opening_hours",
    "horario": "opening_hours",
    "priceRange": "price_range",
    "precio": "price_range",
    "avgPricePerPerson": "avg_price_per_person",
    "precio_medio": "avg_price_per_person",
    "categories": "category_slugs",
    "categorias": "category_slugs",
    "descripcion": "description",
}


@dataclass
class ImportBundle:
    cities: list[dict] = field(default_factory=list)
    categories: list[dict] = field(default_factory=list)
    venues: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=VENUE_COLUMNS))


def price_range_from_price(avg_price: float | int | None) -> str | None:
    if avg_price is None or pd.isna(avg_price):
        return None
    value = float(avg_price)
    if value <= 20:
        return "€"
    if value <= 40:
        return "€€"
    if value <= 80:
        return "€€€"
    return "€€€€"


def _split(value: Any, separator: str) -> list[str]:
    if isinstance(value, (list, tuple)):
        items = value
    elif isinstance(value, str):
        items = value.split(separator)
    else:
        return []
    return [str(v).strip() for v in items if str(v).strip()]


def _present(value: Any) -> bool:
    if isinstance(value, (list, dict)):
        return bool(value)
    return value is not None and not pd.isna(value) and value != ""


def normalize_venues(frame: pd.DataFrame, config: ImportConfig = DEFAULT_IMPORT_CONFIG) -> pd.DataFrame:
    """
    Map raw venue rows onto ``VENUE_COLUMNS``.

    Rows without a title or city are dropped, slugs are generated from the
    title where missing, ``price_range`` is derived from
    ``avg_price_per_person`` where missing or invalid, and the first row
    wins for duplicate slugs.
    """
    renames = {
        raw: canonical
        for raw, canonical in COLUMN_ALIASES.items()
        if raw in frame.columns and canonical not in frame.columns
    }
    df = frame.rename(columns=renames).copy()

    if "geo" in df.columns:
        geo = df["geo"].apply(lambda g: g if isinstance(g, dict) else {})
        if "lat" not in df.columns:
            df["lat"] = geo.apply(lambda g: g.get("lat"))
        if "lng" not in df.columns:
            df["lng"] = geo.apply(lambda g: g.get("lng"))

    for col in VENUE_COLUMNS:
        if col not in df.columns:
            df[col] = None
    df = df[VENUE_COLUMNS].copy()

    df["title"] = df["title"].fillna("").astype(str).str.strip()
    df["city_slug"] = df["city_slug"].fillna("").astype(str).map(slugify)
    df = df[(df["title"] != "") & (df["city_slug"] != "")].copy()

    df["slug"] = [
        slugify(slug) if isinstance(slug, str) and slug.strip() else slugify(title)
        for slug, title in zip(df["slug"], df["title"])
    ]

    df["lat"] = pd.to_numeric(df["lat"], errors="coerce")
    df["lng"] = pd.to_numeric(df["lng"], errors="coerce")
    df["avg_price_per_person"] = pd.to_numeric(df["avg_price_per_person"], errors="coerce")

    derived = df["avg_price_per_person"].apply(price_range_from_price)
    df["price_range"] = df["price_range"].where(df["price_range"].isin(PRICE_RANGES), derived)

    df["category_slugs"] = df["category_slugs"].apply(
        lambda v: [slugify(s) for s in _split(v, config.list_separator)]
    )
    df["opening_hours"] = df["opening_hours"].apply(lambda v: _split(v, config.hours_separator))
    df["social"] = df["social"].apply(lambda s: s if isinstance(s, dict) else {})

    df = df.drop_duplicates(subset="slug", keep="first").reset_index(drop=True)
    return df


def _named_docs(rows: list[dict]) -> list[dict]:
    docs = []
    for row in rows:
        title = str(row.get("title") or "").strip()
        slug = slugify(row.get("slug") or title)
        if title and slug:
            docs.append({**row, "title": title, "slug": slug})
    return docs


def _source_column(frame: pd.DataFrame, canonical: str) -> str | None:
    if canonical in frame.columns:
        return canonical
    for alias, target in COLUMN_ALIASES.items():
        if target == canonical and alias in frame.columns:
            return alias
    return None


def load_bundle(path: str | Path, config: ImportConfig = DEFAULT_IMPORT_CONFIG) -> ImportBundle:
    """
    Read an import file.

    A ``.json`` file holds ``cities``, ``categories`` and ``venues`` lists.
    A ``.csv`` file is a venues table; its cities and categories are
    derived from the distinct values it references.
    """
    path = Path(path)
    if path.suffix.lower() == ".csv":
        raw = pd.read_csv(path, dtype=str)
        venues = normalize_venues(raw, config)
        city_col = _source_column(raw, "city_slug")
        cities = []
        if city_col:
            names = raw[city_col].dropna().astype(str).str.strip()
            cities = _named_docs([{"title": name} for name in dict.fromkeys(names) if name])
        cat_col = _source_column(raw, "category_slugs")
        categories = []
        if cat_col:
            names = [n for value in raw[cat_col] for n in _split(value, config.list_separator)]
            categories = _named_docs([{"title": name} for name in dict.fromkeys(names)])
        return ImportBundle(cities=cities, categories=categories, venues=venues)

    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    venues = normalize_venues(pd.DataFrame(data.get("venues") or []), config)
    return ImportBundle(
        cities=_named_docs(data.get("cities") or []),
        categories=_named_docs(data.get("categories") or []),
        venues=venues,
    )


def _ref(doc_id: str) -> dict:
    return {"_type": "reference", "_ref": doc_id}


def _clean(doc: dict) -> dict:
    return {k: v for k, v in doc.items() if _present(v)}


def build_mutations(bundle: ImportBundle) -> list[dict]:
    """``createOrReplace`` mutations with ids ``city-<slug>``, ``category-<slug>`` and ``venue-<slug>``."""
    mutations: list[dict] = []
    city_ids: dict[str, str] = {}
    category_ids: dict[str, str] = {}

    for city in bundle.cities:
        doc_id = f"city-{city['slug']}"
        city_ids[city["slug"]] = doc_id
        mutations.append({"createOrReplace": _clean({
            "_id": doc_id,
            "_type": "city",
            "title": city["title"],
            "slug": {"_type": "slug", "current": city["slug"]},
            "region": city.get("region"),
            "description": city.get("description"),
            "geo": city.get("geo"),
            "featured": bool(city.get("featured", False)),
        })})

    for category in bundle.categories:
        doc_id = f"category-{category['slug']}"
        category_ids[category["slug"]] = doc_id
        mutations.append({"createOrReplace": _clean({
            "_id": doc_id,
            "_type": "category",
            "title": category["title"],
            "slug": {"_type": "slug", "current": category["slug"]},
            "description": category.get("description"),
            "icon": category.get("icon"),
            "color": category.get("color"),
        })})

    for venue in bundle.venues.to_dict("records"):
        city_id = city_ids.get(venue["city_slug"])
        if not city_id:
            logger.warning("Skipping venue %s: unknown city %s", venue["slug"], venue["city_slug"])
            continue

        categories = []
        for i, slug in enumerate(venue["category_slugs"]):
            if slug in category_ids:
                categories.append({"_key": f"k{i}", **_ref(category_ids[slug])})
            else:
                logger.warning("Venue %s: unknown category %s", venue["slug"], slug)

        geo = None
        if _present(venue["lat"]) and _present(venue["lng"]):
            geo = {"_type": "geopoint", "lat": float(venue["lat"]), "lng": float(venue["lng"])}

        mutations.append({"createOrReplace": _clean({
            "_id": f"venue-{venue['slug']}",
            "_type": "venue",
            "title": venue["title"],
            "slug": {"_type": "slug", "current": venue["slug"]},
            "city": _ref(city_id),
            "address": venue["address"],
            "postalCode": None if not _present(venue["postal_code"]) else str(venue["postal_code"]),
            "phone": venue["phone"],
            "website": venue["website"],
            "geo": geo,
            "openingHours": venue["opening_hours"],
            "priceRange": venue["price_range"],
            "categories": categories,
            "description": venue["description"],
            "social": venue["social"],
        })})

    return mutations


def _batches(items: list, size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


def purge_existing(client: SanityClient, config: ImportConfig = DEFAULT_IMPORT_CONFIG) -> int:
    """Delete documents type by type; referencing types go first."""
    deleted = 0
    for doc_type in config.purge_order:
        ids = client.fetch(groq.DOCUMENT_IDS_BY_TYPE_QUERY, {"type": doc_type}) or []
        for batch in _batches(ids, config.batch_size):
            client.mutate([{"delete": {"id": doc_id}} for doc_id in batch])
        logger.info("Deleted %d %s documents", len(ids), doc_type)
        deleted += len(ids)
    return deleted


def run_import(
    path: str | Path,
    client: SanityClient | None = None,
    purge: bool = False,
    dry_run: bool = False,
    config: ImportConfig = DEFAULT_IMPORT_CONFIG,
) -> dict[str, int]:
    """
    Execute the import.

    Steps:
    - Load and normalise the bundle.
    - Optionally purge existing reviews, venues, cities and categories.
    - Submit the mutations in batches.
    """
    bundle = load_bundle(path, config)
    mutations = build_mutations(bundle)
    counts = {"city": 0, "category": 0, "venue": 0}
    for m in mutations:
        counts[m["createOrReplace"]["_type"]] += 1

    summary = {
        "cities": counts["city"],
        "categories": counts["category"],
        "venues": counts["venue"],
        "skipped_venues": len(bundle.venues) - counts["venue"],
        "deleted": 0,
    }
    if dry_run:
        return summary

    client = client or get_write_client()
    if purge:
        summary["deleted"] = purge_existing(client, config)
    for batch in _batches(mutations, config.batch_size):
        client.mutate(batch)

    logger.info("Import finished: %s", summary)
    return summary


def main(argv: list[str] | None = None) -> dict[str, int]:
    parser = argparse.ArgumentParser(description="Import cities, categories and venues into Sanity.")
    parser.add_argument("path", help="JSON bundle or venues CSV")
    parser.add_argument("--purge", action="store_true", help="delete existing content first")
    parser.add_argument("--dry-run", action="store_true", help="only report what would be imported")
    args = parser.parse_args(argv)
    return run_import(args.path, purge=args.purge, dry_run=args.dry_run)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    result = main()
    print(
        f"Import complete: {result['cities']} cities, {result['categories']} categories, "
        f"{result['venues']} venues ({result['skipped_venues']} skipped, {result['deleted']} deleted)."
    )
