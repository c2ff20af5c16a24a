from typing import Dict

from fastapi import APIRouter, Depends

from shortlink_app.dependencies import get_admin_service, require_admin
from shortlink_app.schemas.url import DeleteAllResponse, DeletedMapping, ErrorResponse
from shortlink_app.services.admin_service import AdminService

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
    responses={401: {"model": ErrorResponse, "description": "Bad or missing credentials"}},
)


@router.get("/codes", response_model=Dict[str, str])
async def list_codes(admin_service: AdminService = Depends(get_admin_service)):
    """Every mapping as {code: url}"""
    return await admin_service.list_all()


@router.delete("/codes", response_model=DeleteAllResponse)
async def delete_all_codes(admin_service: AdminService = Depends(get_admin_service)):
    count = await admin_service.delete_all()
    return DeleteAllResponse(deleted=count)


@router.delete(
    "/codes/{code}",
    response_model=DeletedMapping,
    responses={404: {"model": ErrorResponse, "description": "Unknown code"}},
)
async def delete_code(
    code: str,
    admin_service: AdminService = Depends(get_admin_service)
):
    url = await admin_service.delete(code)
    return DeletedMapping(code=code, url=url)
