from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class SiteConfig:
    name: str = os.getenv("SITE_NAME", "SaborLocal")
    url: str = os.getenv("SITE_URL", "https://example.com").rstrip("/")
    description: str = os.getenv(
        "SITE_DESCRIPTION",
        "Descubre los mejores locales y restaurantes con nuestras reseñas detalladas y honestas.",
    )
    author: str = os.getenv("SITE_AUTHOR", "Equipo SaborLocal")
    locale: str = "es-ES"
    og_locale: str = "es_ES"
    twitter_handle: str = os.getenv("SITE_TWITTER", "@saborlocal")
    default_image: str = "/og/default.jpg"
    logo: str = "/logo.png"


DEFAULT_SITE_CONFIG = SiteConfig()

PRICE_RANGE_LABELS = {
    "€": "Económico (€)",
    "€€": "Moderado (€€)",
    "€€€": "Caro (€€€)",
    "€€€€": "Muy caro (€€€€)",
}
