from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from structlog import get_logger

from app.core.errors import ErrorResponse
from app.dependencies.permissions import Capability, require
from app.dependencies.rate_limit import rate_limit
from app.dependencies.store import get_store
from app.schemas.property import PropertyCreate, PropertyUpdate, ReportRequest
from app.services import properties as property_service
from app.services.search import get_property, list_properties, search_properties
from app.stores.base import Store

logger = get_logger()
router = APIRouter(prefix="/api/properties", tags=["properties"])


@router.get("", dependencies=[rate_limit(times=60, seconds=60)])
async def list_properties_endpoint(request: Request, store: Store = Depends(get_store)):
    """
    Paginated listing. Accepts ``select``, ``sort``, ``page``, ``limit``, the
    search filters, and ``field`` / ``field[gte|gt|lte|lt|in]`` filters.
    """
    try:
        return await list_properties(store, request.query_params)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("List properties failed", params=str(request.query_params), error=str(e), exc_info=True)
        raise ErrorResponse("Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get("/search", dependencies=[rate_limit(times=30, seconds=60)])
async def search_properties_endpoint(
    q: Optional[str] = Query(None, description="Free text matched against title, description and area"),
    location: Optional[str] = Query(None, description="Case-insensitive match on the area name"),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    property_type: Optional[str] = Query(None, alias="propertyType"),
    bedrooms: Optional[str] = Query(None, description="Minimum number of bedrooms"),
    store: Store = Depends(get_store),
):
    # Raw strings on purpose: malformed values are dropped by the normalizer, not rejected
    params = {
        "q": q,
        "location": location,
        "minPrice": min_price,
        "maxPrice": max_price,
        "propertyType": property_type,
        "bedrooms": bedrooms,
    }
    try:
        return await search_properties(store, params)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Search failed", query=params, error=str(e), exc_info=True)
        raise ErrorResponse("Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get("/{property_id}")
async def get_property_endpoint(property_id: str, store: Store = Depends(get_store)):
    try:
        return await get_property(store, property_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Get property failed", id=property_id, error=str(e), exc_info=True)
        raise ErrorResponse("Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_property_endpoint(
    payload: PropertyCreate,
    user: dict = Depends(require(Capability.CREATE_PROPERTY)),
    store: Store = Depends(get_store),
):
    doc = await property_service.create_property(store, user, payload)
    return {"success": True, "data": doc}


@router.put("/{property_id}")
async def update_property_endpoint(
    property_id: str,
    payload: PropertyUpdate,
    user: dict = Depends(require(Capability.UPDATE_PROPERTY)),
    store: Store = Depends(get_store),
):
    doc = await property_service.update_property(store, user, property_id, payload)
    return {"success": True, "data": doc}


@router.delete("/{property_id}")
async def delete_property_endpoint(
    property_id: str,
    user: dict = Depends(require(Capability.DELETE_PROPERTY)),
    store: Store = Depends(get_store),
):
    await property_service.delete_property(store, user, property_id)
    return {"success": True, "data": {}}


@router.put("/{property_id}/images")
async def upload_images_endpoint(
    property_id: str,
    images: List[UploadFile] = File(...),
    user: dict = Depends(require(Capability.UPLOAD_IMAGES)),
    store: Store = Depends(get_store),
):
    doc = await property_service.add_images(store, user, property_id, images)
    return {"success": True, "data": doc}


@router.post("/{property_id}/favorite")
async def add_favorite_endpoint(
    property_id: str,
    user: dict = Depends(require(Capability.FAVORITE_PROPERTY)),
    store: Store = Depends(get_store),
):
    doc = await property_service.add_favorite(store, user, property_id)
    return {"success": True, "data": doc}


@router.delete("/{property_id}/favorite")
async def remove_favorite_endpoint(
    property_id: str,
    user: dict = Depends(require(Capability.FAVORITE_PROPERTY)),
    store: Store = Depends(get_store),
):
    doc = await property_service.remove_favorite(store, user, property_id)
    return {"success": True, "data": doc}


@router.post("/{property_id}/report", status_code=status.HTTP_201_CREATED)
async def report_property_endpoint(
    property_id: str,
    payload: ReportRequest,
    user: dict = Depends(require(Capability.REPORT_PROPERTY)),
    store: Store = Depends(get_store),
):
    report = await property_service.report_property(store, user, property_id, payload)
    return {"success": True, "data": report}
