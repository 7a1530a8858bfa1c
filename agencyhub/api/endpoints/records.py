"""
Agency Record Endpoints

CRUD for clients, projects, leads, quotes, tasks and contacts. The six
routers share one shape, so they are built by record_router().

RBAC (see core.permissions):
- List/get: any member of the agency
- Create/update/delete: manage-clients for clients, leads, quotes and
  contacts; manage-projects for projects; manage-tasks for tasks
"""
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from typing import Optional, Type

from agencyhub.api.deps import get_caller_context, get_data_access, get_target_agency_id
from agencyhub.core.context import CallerContext
from agencyhub.core.exceptions import NotFound
from agencyhub.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from agencyhub.schemas.common import Page
from agencyhub.schemas.contact import ContactCreate, ContactResponse, ContactUpdate
from agencyhub.schemas.lead import LeadCreate, LeadResponse, LeadUpdate
from agencyhub.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from agencyhub.schemas.quote import QuoteCreate, QuoteResponse, QuoteUpdate
from agencyhub.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from agencyhub.services.data_access import DataAccessAPI
from agencyhub.services.tenant_store import get_entity_kind
from agencyhub.utils.logging import caller_extra, get_logger

logger = get_logger(__name__)


def record_router(
    entity: str,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    response_schema: Type[BaseModel],
) -> APIRouter:
    label = get_entity_kind(entity).label
    router = APIRouter(prefix=f"/{entity}", tags=[entity])

    @router.get("", response_model=Page[response_schema], name=f"list_{entity}")
    async def list_records(
        page: int = Query(1, ge=1),
        page_size: int = Query(20, ge=1, le=100),
        status: Optional[str] = None,
        client_id: Optional[str] = None,
        project_id: Optional[str] = None,
        assigned_to: Optional[str] = None,
        context: CallerContext = Depends(get_caller_context),
        target_agency_id: Optional[str] = Depends(get_target_agency_id),
        api: DataAccessAPI = Depends(get_data_access)
    ):
        """
        List records of the agency, newest first.

        Filtering on a column the record type lacks is a 400.
        """
        filters = {
            name: value
            for name, value in (
                ("status", status),
                ("client_id", client_id),
                ("project_id", project_id),
                ("assigned_to", assigned_to),
            )
            if value is not None
        }
        records, total = api.list(
            context,
            entity,
            filters=filters,
            limit=page_size,
            offset=(page - 1) * page_size,
            target_agency_id=target_agency_id,
        )
        return Page[response_schema](items=records, total=total, page=page, page_size=page_size)

    @router.get("/{record_id}", response_model=response_schema, name=f"get_{entity}")
    async def get_record(
        record_id: str,
        context: CallerContext = Depends(get_caller_context),
        target_agency_id: Optional[str] = Depends(get_target_agency_id),
        api: DataAccessAPI = Depends(get_data_access)
    ):
        record = api.get(context, entity, record_id, target_agency_id=target_agency_id)
        if record is None:
            raise NotFound(label, record_id)
        return record

    @router.post("", response_model=response_schema, status_code=status.HTTP_201_CREATED, name=f"create_{entity}")
    async def create_record(
        payload: create_schema,
        context: CallerContext = Depends(get_caller_context),
        target_agency_id: Optional[str] = Depends(get_target_agency_id),
        api: DataAccessAPI = Depends(get_data_access)
    ):
        record = api.create(context, entity, payload.model_dump(exclude_unset=True), target_agency_id=target_agency_id)
        logger.info(f"{label} created: {record.id}", extra=caller_extra(context))
        return record

    @router.patch("/{record_id}", response_model=response_schema, name=f"update_{entity}")
    async def update_record(
        record_id: str,
        payload: update_schema,
        context: CallerContext = Depends(get_caller_context),
        target_agency_id: Optional[str] = Depends(get_target_agency_id),
        api: DataAccessAPI = Depends(get_data_access)
    ):
        return api.update(
            context,
            entity,
            record_id,
            payload.model_dump(exclude_unset=True),
            target_agency_id=target_agency_id,
        )

    @router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT, name=f"delete_{entity}")
    async def delete_record(
        record_id: str,
        context: CallerContext = Depends(get_caller_context),
        target_agency_id: Optional[str] = Depends(get_target_agency_id),
        api: DataAccessAPI = Depends(get_data_access)
    ):
        """Hard delete. A record other records still point at is a 409."""
        api.delete(context, entity, record_id, target_agency_id=target_agency_id)
        logger.info(f"{label} deleted: {record_id}", extra=caller_extra(context))
        return None

    return router


clients = record_router("clients", ClientCreate, ClientUpdate, ClientResponse)
projects = record_router("projects", ProjectCreate, ProjectUpdate, ProjectResponse)
leads = record_router("leads", LeadCreate, LeadUpdate, LeadResponse)
quotes = record_router("quotes", QuoteCreate, QuoteUpdate, QuoteResponse)
tasks = record_router("tasks", TaskCreate, TaskUpdate, TaskResponse)
contacts = record_router("contacts", ContactCreate, ContactUpdate, ContactResponse)

routers = (clients, projects, leads, quotes, tasks, contacts)
