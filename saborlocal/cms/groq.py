"""
GROQ queries for the Sanity dataset.

Every query takes its inputs as ``$param`` placeholders and is sent with a
``params`` dict. The one exception is the optional slice bound built by
``slice_clause``, which only ever receives a validated ``int``.
"""

from __future__ import annotations

# ── Fragments ────────────────────────────────────────────

IMAGE_FRAGMENT = """
  asset->{
    _id,
    url,
    metadata {
      dimensions,
      lqip
    }
  },
  alt,
  caption
"""

CITY_FRAGMENT = """
  _id,
  title,
  "slug": slug.current,
  region
"""

CATEGORY_FRAGMENT = """
  _id,
  title,
  "slug": slug.current,
  icon,
  color
"""

VENUE_FIELDS = f"""
  _id,
  title,
  "slug": slug.current,
  description,
  address,
  postalCode,
  phone,
  website,
  geo,
  openingHours,
  priceRange,
  schemaType,
  social,
  city->{{{CITY_FRAGMENT}}},
  categories[]->{{{CATEGORY_FRAGMENT}}},
  images[]{{{IMAGE_FRAGMENT}}}
"""

VENUE_BASIC_FIELDS = f"""
  _id,
  title,
  "slug": slug.current,
  address,
  priceRange,
  city->{{{CITY_FRAGMENT}}},
  categories[]->{{{CATEGORY_FRAGMENT}}},
  images[0]{{{IMAGE_FRAGMENT}}}
"""

REVIEW_FIELDS = f"""
  _id,
  title,
  "slug": slug.current,
  visitDate,
  ratings,
  avgTicket,
  tldr,
  author,
  tags,
  publishedAt,
  gallery[0]{{{IMAGE_FRAGMENT}}},
  venue->{{
    _id,
    title,
    "slug": slug.current,
    priceRange,
    city->{{{CITY_FRAGMENT}}}
  }}
"""

POST_FIELDS = f"""
  _id,
  title,
  "slug": slug.current,
  excerpt,
  tags,
  author,
  publishedAt,
  cover{{{IMAGE_FRAGMENT}}},
  category->{{{CATEGORY_FRAGMENT}}}
"""

_VENUE_RATING_PROJECTION = """
  "avgRating": math::avg(*[_type == "review" && venue._ref == ^._id].ratings.food),
  "reviewCount": count(*[_type == "review" && venue._ref == ^._id])
"""


def slice_clause(limit: int | None) -> str:
    """Return ``[0...limit]`` for a positive int, or ``""`` for no limit."""
    if limit is None:
        return ""
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise TypeError(f"limit must be an int, got {type(limit).__name__}")
    if limit < 0:
        raise ValueError("limit must not be negative")
    return f"[0...{limit}]"


# ── Detail pages ─────────────────────────────────────────

VENUE_BY_SLUG_QUERY = f"""
*[_type == "venue" && slug.current == $slug][0]{{
  {VENUE_FIELDS},
  {_VENUE_RATING_PROJECTION},
  "reviews": *[_type == "review" && references(^._id)] | order(publishedAt desc)[0...6]{{
    _id,
    title,
    "slug": slug.current,
    visitDate,
    ratings,
    avgTicket,
    tldr,
    gallery[0]{{{IMAGE_FRAGMENT}}},
    publishedAt
  }}
}}
"""

REVIEW_BY_SLUG_QUERY = f"""
*[_type == "review" && slug.current == $slug][0]{{
  _id,
  title,
  "slug": slug.current,
  visitDate,
  ratings,
  avgTicket,
  highlights,
  pros,
  cons,
  tldr,
  faq,
  body,
  gallery[]{{{IMAGE_FRAGMENT}}},
  author,
  authorAvatar{{{IMAGE_FRAGMENT}}},
  tags,
  publishedAt,
  venue->{{{VENUE_FIELDS}}}
}}
"""

POST_BY_SLUG_QUERY = f"""
*[_type == "post" && slug.current == $slug][0]{{
  _id,
  title,
  "slug": slug.current,
  excerpt,
  cover{{{IMAGE_FRAGMENT}}},
  faq,
  body,
  tags,
  category->{{{CATEGORY_FRAGMENT}}},
  relatedVenues[]->{{
    _id,
    title,
    "slug": slug.current,
    city->{{{CITY_FRAGMENT}}},
    images[0]{{{IMAGE_FRAGMENT}}}
  }},
  author,
  authorAvatar{{{IMAGE_FRAGMENT}}},
  featured,
  publishedAt,
  seoTitle,
  seoDescription
}}
"""

CITY_BY_SLUG_QUERY = f"""
*[_type == "city" && slug.current == $slug][0]{{
  _id,
  title,
  "slug": slug.current,
  region,
  description,
  geo,
  heroImage{{{IMAGE_FRAGMENT}}},
  "venues": *[_type == "venue" && city._ref == ^._id] | order(title asc){{
    {VENUE_BASIC_FIELDS},
    {_VENUE_RATING_PROJECTION}
  }}
}}
"""

CATEGORY_BY_SLUG_QUERY = f"""
*[_type == "category" && slug.current == $slug][0]{{
  _id,
  title,
  "slug": slug.current,
  description,
  icon,
  color,
  "venues": *[_type == "venue" && references(^._id)] | order(title asc){{
    {VENUE_BASIC_FIELDS},
    {_VENUE_RATING_PROJECTION}
  }}
}}
"""

# ── Listings ─────────────────────────────────────────────

LATEST_REVIEWS_QUERY = f"""
*[_type == "review"] | order(publishedAt desc)[0...$limit]{{
  {REVIEW_FIELDS}
}}
"""

FEATURED_REVIEWS_QUERY = f"""
*[_type == "review" && featured == true] | order(publishedAt desc)[0...$limit]{{
  {REVIEW_FIELDS}
}}
"""

POSTS_QUERY = f"""
*[_type == "post"] | order(publishedAt desc)[0...$limit]{{
  {POST_FIELDS}
}}
"""

POSTS_BY_TAG_QUERY = f"""
*[_type == "post" && $tag in tags] | order(publishedAt desc)[0...$limit]{{
  {POST_FIELDS}
}}
"""

CITIES_WITH_COUNTS_QUERY = f"""
*[_type == "city"] | order(title asc){{
  _id,
  title,
  "slug": slug.current,
  region,
  description,
  heroImage{{{IMAGE_FRAGMENT}}},
  featured,
  "venueCount": count(*[_type == "venue" && city._ref == ^._id]),
  "reviewCount": count(*[_type == "review" && venue->city._ref == ^._id])
}}
"""

CATEGORIES_WITH_COUNTS_QUERY = """
*[_type == "category"] | order(title asc){
  _id,
  title,
  "slug": slug.current,
  description,
  icon,
  color,
  featured,
  "venueCount": count(*[_type == "venue" && references(^._id)])
}
"""

RELATED_VENUES_QUERY = f"""
*[_type == "venue" &&
  _id != $venueId &&
  (city._ref == $cityRef || count(categories[]._ref[@ in $categoryRefs]) > 0)
] | order(_createdAt desc)[0...4]{{
  {VENUE_BASIC_FIELDS}
}}
"""

# ── Search ───────────────────────────────────────────────

SEARCH_VENUES_QUERY = f"""
*[_type == "venue" && (
  title match $searchTerm + "*" ||
  description match $searchTerm + "*" ||
  address match $searchTerm + "*"
)] | order(_score desc)[0...20]{{
  {VENUE_BASIC_FIELDS},
  _score
}}
"""

SEARCH_REVIEWS_QUERY = f"""
*[_type == "review" && (
  title match $searchTerm + "*" ||
  tldr match $searchTerm + "*" ||
  author match $searchTerm + "*"
)] | order(_score desc)[0...20]{{
  {REVIEW_FIELDS},
  _score
}}
"""

SEARCH_POSTS_QUERY = f"""
*[_type == "post" && (
  title match $searchTerm + "*" ||
  excerpt match $searchTerm + "*" ||
  $searchTerm in tags
)] | order(_score desc)[0...20]{{
  {POST_FIELDS},
  _score
}}
"""

# ── Sitemaps and stats ───────────────────────────────────

SITEMAP_VENUES_QUERY = """
*[_type == "venue" && defined(slug.current)]{
  "slug": slug.current,
  "city": city->{"slug": slug.current},
  _updatedAt
}
"""

SITEMAP_REVIEWS_QUERY = """
*[_type == "review" && defined(slug.current)]{
  "slug": slug.current,
  "venue": venue->{
    "slug": slug.current,
    "city": city->{"slug": slug.current}
  },
  visitDate,
  publishedAt,
  _updatedAt
}
"""

SITEMAP_POSTS_QUERY = """
*[_type == "post" && defined(slug.current)]{
  "slug": slug.current,
  publishedAt,
  _updatedAt
}
"""

SITEMAP_CITIES_QUERY = """
*[_type == "city" && defined(slug.current)]{
  "slug": slug.current,
  _updatedAt
}
"""

SITEMAP_CATEGORIES_QUERY = """
*[_type == "category" && defined(slug.current)]{
  "slug": slug.current,
  _updatedAt
}
"""

STATS_QUERY = """
{
  "totalVenues": count(*[_type == "venue"]),
  "totalReviews": count(*[_type == "review"]),
  "totalPosts": count(*[_type == "post"]),
  "totalCategories": count(*[_type == "category"]),
  "totalCities": count(*[_type == "city"])
}
"""

CITY_STATS_QUERY = """
*[_type == "city"]{
  title,
  "slug": slug.current,
  "venueCount": count(*[_type == "venue" && city._ref == ^._id]),
  "reviewCount": count(*[_type == "review" && venue->city._ref == ^._id])
} | order(venueCount desc)
"""

# ── Data validation ──────────────────────────────────────

VALIDATE_VENUE_DATA_QUERY = """
*[_type == "venue" && (
  !defined(title) ||
  !defined(slug) ||
  !defined(description) ||
  !defined(address) ||
  !defined(city)
)]{
  _id,
  title,
  "missingFields": [
    select(!defined(title) => "title"),
    select(!defined(slug) => "slug"),
    select(!defined(description) => "description"),
    select(!defined(address) => "address"),
    select(!defined(city) => "city")
  ][defined(@)]
}
"""

VALIDATE_REVIEW_DATA_QUERY = """
*[_type == "review" && (
  !defined(title) ||
  !defined(slug) ||
  !defined(author) ||
  !defined(venue) ||
  !defined(ratings)
)]{
  _id,
  title,
  "missingFields": [
    select(!defined(title) => "title"),
    select(!defined(slug) => "slug"),
    select(!defined(author) => "author"),
    select(!defined(venue) => "venue"),
    select(!defined(ratings) => "ratings")
  ][defined(@)]
}
"""

# ── Featured items ───────────────────────────────────────

_FEATURED_REF_PROJECTION = f"""
  "reviewRef": reviewRef->{{
    _id,
    title,
    "slug": slug.current,
    tldr,
    ratings,
    gallery[0]{{{IMAGE_FRAGMENT}}},
    "venue": venue->{{
      title,
      "slug": slug.current,
      "city": city->{{title, "slug": slug.current}}
    }}
  }},
  "venueRef": venueRef->{{
    _id,
    title,
    "slug": slug.current,
    description,
    images[0]{{{IMAGE_FRAGMENT}}},
    "city": city->{{title, "slug": slug.current}}
  }},
  "categoryRef": categoryRef->{{_id, title, "slug": slug.current, description}},
  "collectionRef": collectionRef->{{_id, title, "slug": slug.current}},
  "guideRef": guideRef->{{
    _id,
    title,
    "slug": slug.current,
    "city": city->{{title, "slug": slug.current}}
  }}
"""

FEATURED_ITEM_FIELDS = f"""
  _id,
  _type,
  title,
  type,
  customTitle,
  customDescription,
  customCTA,
  customUrl,
  isActive,
  order,
  {_FEATURED_REF_PROJECTION},
  seo,
  _createdAt,
  _updatedAt
"""

FEATURED_ITEM_BY_ID_QUERY = f"""
*[_type == "featuredItem" && _id == $id][0]{{
  {FEATURED_ITEM_FIELDS}
}}
"""

FEATURED_ITEMS_SUMMARY_QUERY = """
*[_type == "featuredItem"]{ _id, type, isActive }
"""


def featured_items_query(active_only: bool = False, limit: int | None = None) -> str:
    """Featured items ordered by ``order``, optionally active only and sliced."""
    condition = '_type == "featuredItem"'
    if active_only:
        condition += " && isActive == true"
    return f"""
*[{condition}] | order(order asc){slice_clause(limit)}{{
  {FEATURED_ITEM_FIELDS}
}}
"""


REFERENCE_QUERIES = {
    "review": """
*[_type == "review" && defined(venue->slug.current)] | order(venue->title asc){
  _id,
  "title": venue->title + " - " + title,
  "slug": slug.current
}
""",
    "venue": """
*[_type == "venue" && defined(slug.current)] | order(title asc){ _id, title, "slug": slug.current }
""",
    "category": """
*[_type == "category" && defined(slug.current)] | order(title asc){ _id, title, "slug": slug.current }
""",
    "guide": """
*[_type == "guide" && defined(slug.current)] | order(title asc){ _id, title, "slug": slug.current }
""",
}

# ── Admin lookups ────────────────────────────────────────

ADMIN_DOCUMENT_BY_ID_QUERY = """
*[_type == $type && _id == $id][0]
"""

SLUG_TAKEN_QUERY = """
count(*[_type == $type && slug.current == $slug && _id != $excludeId]) > 0
"""

REFERENCING_COUNT_QUERY = """
count(*[_type == $type && references($id)])
"""

ADMIN_VENUES_QUERY = f"""
*[_type == "venue"] | order(title asc){{
  {VENUE_BASIC_FIELDS},
  phone,
  website,
  featured,
  _updatedAt
}}
"""

ADMIN_REVIEWS_QUERY = f"""
*[_type == "review"] | order(publishedAt desc){{
  {REVIEW_FIELDS},
  published,
  featured,
  _updatedAt
}}
"""

ADMIN_POSTS_QUERY = f"""
*[_type == "post"] | order(publishedAt desc){{
  {POST_FIELDS},
  featured,
  _updatedAt
}}
"""

# ── Internal linking collections ─────────────────────────

LINK_GUIDES_QUERY = """
*[_type == "guide" && published == true]{
  _id, _type, title, "slug": slug.current, "city": city->{title, "slug": slug.current},
  neighborhood, theme, sections, publishedAt
}
"""

LINK_LISTS_QUERY = """
*[_type == "list" && published == true]{
  _id, _type, title, "slug": slug.current, "city": city->{title, "slug": slug.current},
  dish, listType, publishedAt
}
"""

LINK_RECIPES_QUERY = """
*[_type == "recipe" && published == true]{
  _id, _type, title, "slug": slug.current, "dishName": title, publishedAt
}
"""

LINK_DISH_GUIDES_QUERY = """
*[_type == "dish-guide" && published == true]{
  _id, _type, title, "slug": slug.current, dishName, publishedAt
}
"""

LINK_VENUES_QUERY = """
*[_type == "venue"]{
  _id, _type, title, "slug": slug.current, "city": city->{title, "slug": slug.current},
  "categories": categories[]->{title, "slug": slug.current}, address, "publishedAt": _createdAt
}
"""

LINK_REVIEWS_QUERY = """
*[_type == "review" && published == true]{
  _id, _type, title, "slug": slug.current,
  "venue": venue->{"slug": slug.current, "city": city->{title, "slug": slug.current}},
  tags, publishedAt
}
"""

LINK_SOURCE_QUERY = """
*[_type == $type && slug.current == $slug][0]{
  _id, _type, title, "slug": slug.current, "city": city->{title, "slug": slug.current},
  "categories": categories[]->{title, "slug": slug.current},
  "venue": venue->{"slug": slug.current, "city": city->{title, "slug": slug.current}},
  neighborhood, theme, dish, dishName, tags,
  "sections": sections[]{title, "venues": venues[]{"venue": venue->{_id}}},
  "relatedVenues": relatedVenues[]->{title, "slug": slug.current, "city": city->{title, "slug": slug.current}},
  "bestVenues": bestVenues[]{position, "venue": venue->{title, "slug": slug.current}}
}
"""

# ── Dashboard analytics ──────────────────────────────────

DASHBOARD_STATS_QUERY = """
{
  "totalReviews": count(*[_type == "review"]),
  "totalVenues": count(*[_type == "venue"]),
  "totalCities": count(*[_type == "city"]),
  "totalPosts": count(*[_type == "post"]),
  "totalCategories": count(*[_type == "category"]),
  "publishedReviews": count(*[_type == "review" && published == true]),
  "draftReviews": count(*[_type == "review" && published != true]),
  "publishedPosts": count(*[_type == "post" && defined(publishedAt)]),
  "draftPosts": count(*[_type == "post" && !defined(publishedAt)])
}
"""

RECENT_CONTENT_QUERY = """
{
  "recentReviews": *[_type == "review"] | order(_createdAt desc)[0...5]{
    _id, title, _createdAt, published,
    "venue": venue->{title, "city": city->title},
    ratings
  },
  "recentVenues": *[_type == "venue"] | order(_createdAt desc)[0...5]{
    _id, title, _createdAt, "city": city->title
  },
  "recentPosts": *[_type == "post"] | order(_createdAt desc)[0...5]{
    _id, title, _createdAt, publishedAt, excerpt
  }
}
"""

GROWTH_QUERY = """
{
  "reviews": *[_type == "review" && _createdAt > $cutoff]._createdAt,
  "venues": *[_type == "venue" && _createdAt > $cutoff]._createdAt,
  "posts": *[_type == "post" && _createdAt > $cutoff]._createdAt
}
"""

RATINGS_QUERY = """
*[_type == "review" && published == true && defined(ratings)].ratings{food, service, ambience, value}
"""

CATEGORY_STATS_QUERY = """
*[_type == "category"]{
  title,
  "slug": slug.current,
  "venueCount": count(*[_type == "venue" && references(^._id)]),
  "reviewCount": count(*[_type == "review" && ^._id in venue->categories[]._ref])
} | order(venueCount desc)[0...10]
"""

# ── Data import ──────────────────────────────────────────

DOCUMENT_IDS_BY_TYPE_QUERY = """
*[_type == $type]._id
"""
