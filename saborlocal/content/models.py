from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

PriceRange = Literal["€", "€€", "€€€", "€€€€"]
SchemaType = Literal["Restaurant", "CafeOrCoffeeShop", "BarOrPub", "LocalBusiness"]


class FeaturedType(str, Enum):
    review = "review"
    venue = "venue"
    category = "category"
    collection = "collection"
    guide = "guide"


def _as_list(value: Any) -> list:
    # Listing queries project a single image as an object; dangling refs come back null
    if isinstance(value, dict):
        return [value]
    return [v for v in value or [] if v is not None]


# ── CMS documents (read side) ────────────────────────────────────────────


class CMSDocument(BaseModel):
    """Base for documents read from Sanity: camelCase keys, unknown fields ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str | None = Field(default=None, alias="_id")
    updated_at: str | None = Field(default=None, alias="_updatedAt")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # GROQ projects missing fields as null; let the defaults apply instead
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class SluggedDocument(CMSDocument):
    slug: str | None = None

    @field_validator("slug", mode="before")
    @classmethod
    def _unwrap_slug(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("current")
        return value


class ImageAsset(CMSDocument):
    ref: str | None = Field(default=None, alias="_ref")
    url: str | None = None
    metadata: dict | None = None


class SanityImage(CMSDocument):
    asset: ImageAsset | None = None
    alt: str | None = None
    caption: str | None = None


class Geo(CMSDocument):
    lat: float | None = None
    lng: float | None = None


class FAQ(CMSDocument):
    question: str
    answer: str


class Ratings(CMSDocument):
    food: float = 0.0
    service: float = 0.0
    ambience: float = 0.0
    value: float = 0.0

    @property
    def overall(self) -> float:
        return (self.food + self.service + self.ambience + self.value) / 4


class City(SluggedDocument):
    title: str = ""
    region: str | None = None
    description: str | None = None
    geo: Geo | None = None
    hero_image: SanityImage | None = None
    featured: bool = False
    venue_count: int | None = None
    review_count: int | None = None


class Category(SluggedDocument):
    title: str = ""
    description: str | None = None
    icon: str | None = None
    color: str | None = None
    featured: bool = False
    venue_count: int | None = None


class ReviewSummary(SluggedDocument):
    title: str = ""
    visit_date: str | None = None
    published_at: str | None = None
    ratings: Ratings | None = None
    avg_ticket: float | None = None
    tldr: str | None = None


class Venue(SluggedDocument):
    title: str = ""
    city: City | None = None
    address: str | None = None
    postal_code: str | None = None
    geo: Geo | None = None
    phone: str | None = None
    website: str | None = None
    opening_hours: list[str] = Field(default_factory=list)
    price_range: PriceRange | None = None
    categories: list[Category] = Field(default_factory=list)
    schema_type: SchemaType | None = None
    description: str | None = None
    social: dict[str, str] = Field(default_factory=dict)
    images: list[SanityImage] = Field(default_factory=list)
    reviews: list[ReviewSummary] = Field(default_factory=list)
    review_count: int | None = None
    avg_rating: float | None = None

    @field_validator("images", "categories", "reviews", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> Any:
        return _as_list(value)

    @field_validator("opening_hours", mode="before")
    @classmethod
    def _split_hours(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [line.strip() for line in value.splitlines() if line.strip()]
        return value

    @field_validator("social", mode="before")
    @classmethod
    def _social(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        return {k: v for k, v in value.items() if isinstance(v, str) and v}


class Review(SluggedDocument):
    title: str = ""
    venue: Venue | None = None
    visit_date: str | None = None
    published_at: str | None = None
    ratings: Ratings | None = None
    avg_ticket: float | None = None
    highlights: list[str] = Field(default_factory=list)
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    tldr: str | None = None
    faq: list[FAQ] = Field(default_factory=list)
    gallery: list[SanityImage] = Field(default_factory=list)
    author: str | None = None
    author_avatar: SanityImage | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("gallery", mode="before")
    @classmethod
    def _wrap_gallery(cls, value: Any) -> Any:
        return _as_list(value)


class Post(SluggedDocument):
    title: str = ""
    excerpt: str | None = None
    cover: SanityImage | None = None
    faq: list[FAQ] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    author: str | None = None
    published_at: str | None = None
    category: Category | None = None
    seo_title: str | None = None
    seo_description: str | None = None


class FeaturedItem(CMSDocument):
    title: str = ""
    type: FeaturedType
    custom_title: str | None = None
    custom_description: str | None = None
    custom_cta: str | None = Field(default=None, alias="customCTA")
    custom_url: str | None = None
    is_active: bool = True
    order: int = 0
    review_ref: dict | None = None
    venue_ref: dict | None = None
    category_ref: dict | None = None
    collection_ref: dict | None = None
    guide_ref: dict | None = None
    seo: dict | None = None

    @property
    def reference(self) -> dict | None:
        return getattr(self, f"{self.type.value}_ref")


# ── Admin request bodies ─────────────────────────────────────────────────


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class FeaturedItemIn(BaseModel):
    title: str = Field(..., min_length=1)
    type: FeaturedType
    custom_title: str | None = None
    custom_description: str | None = None
    custom_cta: str | None = None
    custom_url: str | None = None
    is_active: bool = True
    order: int = Field(default=0, ge=0)
    reference_id: str | None = None


class ReorderItem(BaseModel):
    id: str = Field(..., min_length=1)
    order: int = Field(..., ge=0)


class ReorderRequest(BaseModel):
    items: list[ReorderItem] = Field(..., min_length=1)


class ToggleRequest(BaseModel):
    is_active: bool


class CityIn(BaseModel):
    title: str = Field(..., min_length=1)
    slug: str | None = None
    region: str = ""
    description: str = ""


class CategoryIn(BaseModel):
    title: str = Field(..., min_length=1)
    slug: str | None = None
    description: str = ""
    icon: str | None = None
    color: str | None = None
    featured: bool = False


class VenueIn(BaseModel):
    title: str = Field(..., min_length=1)
    slug: str | None = None
    address: str = Field(..., min_length=1)
    city_id: str | None = None
    category_ids: list[str] = Field(default_factory=list)
    postal_code: str | None = None
    phone: str | None = None
    website: str | None = None
    opening_hours: list[str] = Field(default_factory=list)
    price_range: PriceRange = "€€"
    schema_type: SchemaType = "Restaurant"
    description: str | None = None
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    featured: bool = False


class RatingsIn(BaseModel):
    food: float = Field(..., ge=0, le=10)
    service: float = Field(..., ge=0, le=10)
    ambience: float = Field(..., ge=0, le=10)
    value: float = Field(..., ge=0, le=10)


class FAQIn(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class ReviewIn(BaseModel):
    title: str = Field(..., min_length=1)
    slug: str | None = None
    venue_id: str = Field(..., min_length=1)
    ratings: RatingsIn
    visit_date: str | None = None
    published_at: str | None = None
    avg_ticket: float | None = Field(default=None, ge=0)
    highlights: list[str] = Field(default_factory=list)
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    tldr: str | None = None
    faq: list[FAQIn] = Field(default_factory=list)
    author: str | None = None
    tags: list[str] = Field(default_factory=list)
    published: bool = True
    featured: bool = False


class PostIn(BaseModel):
    title: str = Field(..., min_length=1)
    slug: str | None = None
    excerpt: str | None = None
    body: list[dict] = Field(default_factory=list)
    faq: list[FAQIn] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    author: str | None = None
    category_id: str | None = None
    published_at: str | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    featured: bool = False


class AEOPageIn(BaseModel):
    url: str = ""
    title: str = ""
    description: str = ""
    content: str = ""
    tldr: str = ""
    faqs: list[FAQIn] = Field(default_factory=list)
    json_ld: dict | list | None = None


class RevalidateRequest(BaseModel):
    tag: str = Field(..., min_length=1)
