"""
Admin API router.

All routes sit under ``/api/admin`` and require a session with the
``admin`` role. Domain failures from the content layer surface with their
own status code; CMS failures surface as 500.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from .analytics.aggregator import DASHBOARD_SECTIONS, build_dashboard
from .analytics.store import get_events
from .auth.dependencies import require_admin
from .cms import groq
from .cms.cache import clear_cache, get_cache_stats, revalidate_tag
from .cms.client import SanityClient, SanityError, get_write_client
from .content import admin, featured
from .content.models import (
    AEOPageIn,
    CategoryIn,
    CityIn,
    FeaturedItemIn,
    FeaturedType,
    PostIn,
    ReorderRequest,
    RevalidateRequest,
    ReviewIn,
    ToggleRequest,
    VenueIn,
)
from .seo.aeo_monitor import generate_aeo_report, validate_page_aeo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def get_admin_client() -> SanityClient:
    return get_write_client()


@contextmanager
def _admin_errors(action: str) -> Iterator[None]:
    try:
        yield
    except admin.AdminError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    except SanityError as exc:
        logger.exception("CMS request failed while trying to %s", action)
        raise HTTPException(status_code=500, detail=f"Error al {action}: {exc}")


# ── Featured items ────────────────────────────────────────────────────────


@router.get("/featured-items")
def list_featured_items(action: str | None = None, client: SanityClient = Depends(get_admin_client)):
    if action == "stats":
        return featured.get_featured_items_stats(client)
    return featured.get_all_featured_items(client)


@router.post("/featured-items", status_code=201)
def create_featured_item(body: FeaturedItemIn, client: SanityClient = Depends(get_admin_client)):
    item = featured.create_featured_item(client, body)
    if item is None:
        raise HTTPException(status_code=500, detail="Error al crear el elemento destacado")
    return item


@router.patch("/featured-items")
@router.put("/featured-items/reorder")
def reorder_featured_items(body: ReorderRequest, client: SanityClient = Depends(get_admin_client)) -> dict:
    if not featured.update_featured_item_order(client, body.items):
        raise HTTPException(status_code=500, detail="Error al reordenar los elementos destacados")
    return {"success": True}


@router.get("/featured-items/{item_id}")
def get_featured_item(item_id: str, client: SanityClient = Depends(get_admin_client)):
    item = featured.get_featured_item_by_id(client, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Elemento destacado no encontrado")
    return item


@router.put("/featured-items/{item_id}")
def update_featured_item(item_id: str, body: FeaturedItemIn, client: SanityClient = Depends(get_admin_client)):
    item = featured.update_featured_item(client, item_id, body)
    if item is None:
        raise HTTPException(status_code=500, detail="Error al actualizar el elemento destacado")
    return item


@router.patch("/featured-items/{item_id}")
def toggle_featured_item(item_id: str, body: ToggleRequest, client: SanityClient = Depends(get_admin_client)):
    item = featured.toggle_featured_item_status(client, item_id, body.is_active)
    if item is None:
        raise HTTPException(status_code=500, detail="Error al cambiar el estado del elemento destacado")
    return item


@router.delete("/featured-items/{item_id}")
def delete_featured_item(item_id: str, client: SanityClient = Depends(get_admin_client)) -> dict:
    if not featured.delete_featured_item(client, item_id):
        raise HTTPException(status_code=500, detail="Error al eliminar el elemento destacado")
    return {"success": True}


@router.get("/references")
def references(type: FeaturedType, client: SanityClient = Depends(get_admin_client)):
    return featured.get_references_for_select(client, type)


# ── Content CRUD ──────────────────────────────────────────────────────────


def _register_crud(path: str, type_name: str, body_model: type[BaseModel]) -> None:
    """Add list/get/create/update/delete routes for one content type."""

    def list_items(client: SanityClient = Depends(get_admin_client)):
        with _admin_errors(f"listar {path}"):
            return admin.list_documents(client, type_name)

    def get_item(doc_id: str, client: SanityClient = Depends(get_admin_client)):
        with _admin_errors(f"cargar {path}"):
            return admin.get_document(client, type_name, doc_id)

    def create_item(body: body_model, client: SanityClient = Depends(get_admin_client)):
        with _admin_errors(f"crear {path}"):
            return admin.create_document(client, type_name, body)

    def update_item(doc_id: str, body: body_model, client: SanityClient = Depends(get_admin_client)):
        with _admin_errors(f"actualizar {path}"):
            return admin.update_document(client, type_name, doc_id, body)

    def delete_item(doc_id: str, client: SanityClient = Depends(get_admin_client)):
        with _admin_errors(f"eliminar {path}"):
            admin.delete_document(client, type_name, doc_id)
        return {"success": True}

    router.add_api_route(f"/{path}", list_items, methods=["GET"], name=f"list_{path}")
    router.add_api_route(f"/{path}", create_item, methods=["POST"], status_code=201, name=f"create_{type_name}")
    router.add_api_route(f"/{path}/{{doc_id}}", get_item, methods=["GET"], name=f"get_{type_name}")
    router.add_api_route(f"/{path}/{{doc_id}}", update_item, methods=["PUT"], name=f"update_{type_name}")
    router.add_api_route(f"/{path}/{{doc_id}}", delete_item, methods=["DELETE"], name=f"delete_{type_name}")


_register_crud("cities", "city", CityIn)
_register_crud("categories", "category", CategoryIn)
_register_crud("venues", "venue", VenueIn)
_register_crud("reviews", "review", ReviewIn)
_register_crud("posts", "post", PostIn)


@router.get("/validate")
def validate_content(client: SanityClient = Depends(get_admin_client)) -> dict:
    """Venues and reviews missing required fields."""
    with _admin_errors("validar el contenido"):
        return {
            "venues": client.fetch(groq.VALIDATE_VENUE_DATA_QUERY) or [],
            "reviews": client.fetch(groq.VALIDATE_REVIEW_DATA_QUERY) or [],
        }


# ── AEO ───────────────────────────────────────────────────────────────────


@router.post("/aeo/validate")
def aeo_validate(body: AEOPageIn) -> dict:
    result = validate_page_aeo(body)
    return {"result": result, "report": generate_aeo_report(result)}


# ── Analytics & cache ─────────────────────────────────────────────────────


@router.get("/analytics")
def analytics(type: str = "all", client: SanityClient = Depends(get_admin_client)):
    if type != "all" and type not in DASHBOARD_SECTIONS:
        raise HTTPException(status_code=400, detail=f"Tipo de analítica no válido: {type}")
    return build_dashboard(client, get_events(), type)


@router.get("/cache")
def cache_stats() -> dict:
    return get_cache_stats()


@router.delete("/cache")
def flush_cache() -> Response:
    clear_cache()
    return Response(status_code=204)


@router.post("/revalidate")
def revalidate(body: RevalidateRequest) -> dict:
    dropped = revalidate_tag(body.tag)
    logger.info("Revalidated tag %s (%d entries)", body.tag, dropped)
    return {"revalidated": True, "tag": body.tag, "entries": dropped}
