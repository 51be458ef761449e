"""
Sanity image CDN URLs.

Images arrive as raw CMS dicts (``{"asset": {...}, "alt": ...}``). URLs are
built against ``https://cdn.sanity.io/images/<project>/<dataset>/`` with the
image-pipeline query parameters (``w``, ``h``, ``q``, ``fm``, ...).
"""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import urlencode

from .config import DEFAULT_SANITY_CONFIG, SanityConfig

PLACEHOLDER_IMAGE = "/placeholder-image.jpg"

_DEFAULT_SIZES = "(max-width: 768px) 100vw, (max-width: 1200px) 50vw, 33vw"

IMAGE_PRESETS: dict[str, dict[str, Any]] = {
    "hero": {"width": 1920, "height": 800, "quality": 90, "format": "webp", "fit": "crop", "crop": "center", "auto": "format"},
    "reviewCard": {"width": 400, "height": 300, "quality": 85, "format": "webp", "fit": "crop", "crop": "center", "auto": "format"},
    "gallery": {"width": 800, "height": 600, "quality": 85, "format": "webp", "fit": "crop", "crop": "center", "auto": "format"},
    "thumbnail": {"width": 150, "height": 150, "quality": 80, "format": "webp", "fit": "crop", "crop": "center", "auto": "format"},
    "openGraph": {"width": 1200, "height": 630, "quality": 90, "format": "jpg", "fit": "crop", "crop": "center", "auto": "format"},
    "avatar": {"width": 100, "height": 100, "quality": 85, "format": "webp", "fit": "crop", "crop": "faces", "auto": "format"},
    "banner": {"width": 1200, "height": 400, "quality": 90, "format": "webp", "fit": "crop", "crop": "center", "auto": "format"},
    "listing": {"width": 300, "height": 200, "quality": 80, "format": "webp", "fit": "crop", "crop": "center", "auto": "format"},
}


def _as_dict(image: Any) -> dict:
    if image is None:
        return {}
    if hasattr(image, "model_dump"):
        return image.model_dump(by_alias=True, exclude_none=True)
    return dict(image) if isinstance(image, Mapping) else {}


def _asset(image: Any) -> dict:
    asset = _as_dict(image).get("asset")
    return asset if isinstance(asset, Mapping) else {}


def _base_url(asset: Mapping, config: SanityConfig) -> str | None:
    """Resolve ``<id>-<W>x<H>.<ext>`` from an asset id or reference."""
    ref = asset.get("_id") or asset.get("_ref")
    if isinstance(ref, str) and ref.startswith("image-"):
        body, _, ext = ref[len("image-"):].rpartition("-")
        if body and ext:
            return (
                f"https://{config.cdn_host}/images/"
                f"{config.project_id}/{config.dataset}/{body}.{ext}"
            )
    url = asset.get("url")
    return url if isinstance(url, str) and url else None


def url_for(
    image: Any,
    width: int | None = None,
    height: int | None = None,
    quality: int | None = None,
    format: str | None = None,
    fit: str | None = None,
    crop: str | None = None,
    auto: str | None = None,
    blur: int | None = None,
    sharpen: int | None = None,
    config: SanityConfig = DEFAULT_SANITY_CONFIG,
) -> str:
    """Build a CDN URL for ``image`` or return the placeholder when it has no asset."""
    base = _base_url(_asset(image), config)
    if base is None:
        return PLACEHOLDER_IMAGE

    params: list[tuple[str, Any]] = []
    if width:
        params.append(("w", width))
    if height:
        params.append(("h", height))
    if quality:
        params.append(("q", quality))
    if format:
        params.append(("fm", format))
    if fit:
        params.append(("fit", fit))
    if crop:
        params.append(("crop", crop))
    if auto == "format":
        params.append(("auto", "format"))
    elif auto == "compress":
        params.append(("auto", "format,compress"))
    if blur:
        params.append(("blur", blur))
    if sharpen:
        params.append(("sharp", sharpen))

    if not params:
        return base
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{urlencode(params, safe=',')}"


def preset_image_url(image: Any, preset: str) -> str:
    if preset not in IMAGE_PRESETS:
        raise KeyError(f"Unknown image preset: {preset}")
    return url_for(image, **IMAGE_PRESETS[preset])


def generate_responsive_images(image: Any, sizes: list[dict]) -> list[dict]:
    return [
        {
            "url": url_for(
                image,
                width=size["width"],
                height=size.get("height"),
                quality=size.get("quality") or 85,
                format="webp",
                auto="format",
            ),
            "width": size["width"],
            "height": size.get("height"),
        }
        for size in sizes
    ]


def generate_srcset(
    image: Any,
    widths: tuple[int, ...] = (400, 800, 1200, 1600),
    quality: int = 85,
) -> str:
    return ", ".join(
        f"{url_for(image, width=w, quality=quality, format='webp', auto='format')} {w}w"
        for w in widths
    )


def image_with_placeholder(image: Any) -> dict:
    """Main URL plus a low-quality placeholder (the LQIP when the asset has one)."""
    asset = _asset(image)
    metadata = asset.get("metadata") or {}
    dimensions = metadata.get("dimensions") or {}
    placeholder = metadata.get("lqip") or url_for(
        image, width=20, quality=20, format="jpg", blur=2
    )
    return {
        "src": url_for(image, width=800, quality=85, format="webp", auto="format"),
        "placeholder": placeholder,
        "alt": _as_dict(image).get("alt") or "",
        "width": dimensions.get("width"),
        "height": dimensions.get("height"),
    }


def image_props(
    image: Any,
    width: int = 800,
    height: int | None = None,
    quality: int = 85,
    sizes: str = _DEFAULT_SIZES,
    priority: bool = False,
) -> dict:
    """Attributes for a responsive ``<img>``; height defaults to a 4:3 ratio."""
    lqip = (_asset(image).get("metadata") or {}).get("lqip")
    return {
        "src": url_for(image, width=width, height=height, quality=quality, format="webp", auto="format"),
        "alt": _as_dict(image).get("alt") or "",
        "width": width,
        "height": height or round(width * 0.75),
        "sizes": sizes,
        "priority": priority,
        "placeholder": "blur" if lqip else "empty",
        "blur_data_url": lqip,
    }


def image_seo_data(image: Any, width: int = 1200, height: int = 630) -> dict:
    return {
        "url": url_for(
            image,
            width=width,
            height=height,
            quality=90,
            format="jpg",
            fit="crop",
            crop="center",
            auto="format",
        ),
        "width": width,
        "height": height,
        "alt": _as_dict(image).get("alt") or "",
    }


def generate_device_images(image: Any) -> dict:
    return {
        "mobile": preset_image_url(image, "listing"),
        "tablet": preset_image_url(image, "reviewCard"),
        "desktop": preset_image_url(image, "gallery"),
        "hero": preset_image_url(image, "hero"),
    }


def is_valid_image(image: Any) -> bool:
    asset = _asset(image)
    return isinstance(asset.get("_id"), str) and isinstance(asset.get("url"), str)


def image_dimensions(image: Any) -> dict:
    dimensions = (_asset(image).get("metadata") or {}).get("dimensions") or {}
    return {
        "width": dimensions.get("width") or 800,
        "height": dimensions.get("height") or 600,
        "aspect_ratio": dimensions.get("aspectRatio") or 1.33,
    }


def calculate_dimensions(
    original_width: int,
    original_height: int,
    max_width: int | None = None,
    max_height: int | None = None,
) -> dict:
    """Scale to fit inside ``max_width`` x ``max_height`` keeping the aspect ratio."""
    aspect_ratio = original_width / original_height

    if max_width and max_height:
        if aspect_ratio > max_width / max_height:
            return {"width": max_width, "height": round(max_width / aspect_ratio)}
        return {"width": round(max_height * aspect_ratio), "height": max_height}
    if max_width:
        return {"width": max_width, "height": round(max_width / aspect_ratio)}
    if max_height:
        return {"width": round(max_height * aspect_ratio), "height": max_height}
    return {"width": original_width, "height": original_height}
