"""
Agency Endpoints

- GET/PATCH /agencies/current: the caller's agency (super_admin: X-Agency-Id)
- GET /agencies: every agency, super_admin only
- DELETE /agencies/{agency_id}: remove an agency with all its users and
  records, super_admin only
"""
from fastapi import APIRouter, Depends, Query
from typing import Optional

from agencyhub.api.deps import get_caller_context, get_data_access, get_target_agency_id
from agencyhub.core.context import CallerContext
from agencyhub.schemas.agency import AgencyResponse, AgencyUpdate
from agencyhub.schemas.cascade import CascadeReportResponse
from agencyhub.schemas.common import Page
from agencyhub.services.data_access import DataAccessAPI

router = APIRouter(prefix="/agencies", tags=["agencies"])


@router.get("", response_model=Page[AgencyResponse])
async def list_agencies(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    context: CallerContext = Depends(get_caller_context),
    api: DataAccessAPI = Depends(get_data_access)
):
    agencies, total = api.list_agencies(context, limit=page_size, offset=(page - 1) * page_size)
    return Page[AgencyResponse](items=agencies, total=total, page=page, page_size=page_size)


@router.get("/current", response_model=AgencyResponse)
async def get_current_agency(
    context: CallerContext = Depends(get_caller_context),
    target_agency_id: Optional[str] = Depends(get_target_agency_id),
    api: DataAccessAPI = Depends(get_data_access)
):
    return api.get_agency(context, target_agency_id=target_agency_id)


@router.patch("/current", response_model=AgencyResponse)
async def update_current_agency(
    agency_data: AgencyUpdate,
    context: CallerContext = Depends(get_caller_context),
    target_agency_id: Optional[str] = Depends(get_target_agency_id),
    api: DataAccessAPI = Depends(get_data_access)
):
    """Update agency settings. Requires manage-team."""
    return api.update_agency(
        context,
        agency_data.model_dump(exclude_unset=True),
        target_agency_id=target_agency_id,
    )


@router.delete("/{agency_id}", response_model=CascadeReportResponse)
async def purge_agency(
    agency_id: str,
    context: CallerContext = Depends(get_caller_context),
    api: DataAccessAPI = Depends(get_data_access)
):
    """
    Permanently delete an agency.

    All users and records of the agency go in a single transaction.
    """
    report = api.purge_agency(context, agency_id)
    return CascadeReportResponse.model_validate(report)
