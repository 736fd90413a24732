from fastapi import APIRouter, Depends, HTTPException, status

from restmeta.fields.registry import FieldRegistry
from restmeta.routes.posts import get_field_registry

router = APIRouter()


@router.get("/fields/{resource_type}")
async def list_fields(resource_type: str, registry: FieldRegistry = Depends(get_field_registry)):
    """Describe the metadata fields registered on a resource type."""
    if resource_type not in registry.resource_types:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown resource type '{resource_type}'")
    return {"resource_type": resource_type, "fields": registry.schema_for(resource_type)}
