"""
Catalog routers, one per CatalogSpec.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from samplehub.dependencies.auth import AdminClient, GuestOrClient, SuperAdminClient
from samplehub.dependencies.providers import catalog_service_provider
from samplehub.routers.common import envelope
from samplehub.schemas.common import MessageResponse, PaginatedResponse, ResultResponse
from samplehub.services.catalog_service import ALL_CATALOG_SPECS, CatalogService, CatalogSpec
from samplehub.services.pagination import DeletedFilter


def build_catalog_router(spec: CatalogSpec) -> APIRouter:
    """
    Build the CRUD router of one catalog collection.

    Reads are open to guests; writes need an admin and destructive or
    lifecycle operations a super admin.
    """
    router = APIRouter(prefix=f"/api/v1/{spec.path}", tags=[f"{spec.label}s"])
    Service = Annotated[CatalogService, Depends(catalog_service_provider(spec))]
    CreateBody = spec.create_schema
    UpdateBody = spec.update_schema

    @router.get("/", response_model=PaginatedResponse, summary=f"List {spec.label.lower()}s")
    async def list_items(
        client: GuestOrClient,
        service: Service,
        page: int = 1,
        limit: int = 10,
        timestamp: Optional[str] = None,
        code: Optional[str] = None,
        name: Optional[str] = None,
        status_filter: Annotated[Optional[list[str]], Query(alias="status")] = None,
        deleted: DeletedFilter = "NO",
    ):
        result = await service.list_items(
            page=page,
            limit=limit,
            timestamp=timestamp,
            code=code,
            name=name,
            statuses=status_filter,
            deleted=deleted,
        )
        return envelope(result)

    @router.post(
        "/",
        response_model=ResultResponse,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create a {spec.label.lower()}",
    )
    async def add_item(body: CreateBody, client: AdminClient, service: Service):
        return envelope(await service.add(body))

    @router.patch("/change-status/{item_id}", response_model=ResultResponse)
    async def change_status(item_id: str, client: SuperAdminClient, service: Service):
        """Toggle between Active and Inactive."""
        return envelope(await service.change_status(item_id))

    @router.put("/restore/{item_id}", response_model=ResultResponse)
    async def restore_item(item_id: str, client: SuperAdminClient, service: Service):
        return envelope(await service.restore(item_id))

    @router.delete("/delete/all", response_model=MessageResponse)
    async def delete_all_items(client: SuperAdminClient, service: Service):
        return envelope(await service.delete_all())

    @router.delete("/delete/{item_id}", response_model=MessageResponse)
    async def permanent_delete_item(item_id: str, client: SuperAdminClient, service: Service):
        return envelope(await service.permanent_delete(item_id))

    @router.get("/{item_id}", response_model=ResultResponse)
    async def get_item(item_id: str, client: GuestOrClient, service: Service):
        return envelope(await service.get(item_id, client.role))

    @router.patch("/{item_id}", response_model=ResultResponse)
    async def edit_item(item_id: str, body: UpdateBody, client: AdminClient, service: Service):
        return envelope(await service.edit(item_id, body))

    @router.delete("/{item_id}", response_model=MessageResponse)
    async def delete_item(item_id: str, client: AdminClient, service: Service):
        return envelope(await service.delete(item_id))

    return router


catalog_routers = [build_catalog_router(spec) for spec in ALL_CATALOG_SPECS]
