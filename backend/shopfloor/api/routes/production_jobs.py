"""
Production Jobs API Routes.

Job CRUD plus the reorder endpoint that persists the drag-and-drop machine
queues of the scheduling board.
"""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from shopfloor.api.deps import CurrentClaims, JobServiceDep
from shopfloor.application.dtos import (
    CreateProductionJobRequest,
    ProductionJobResponse,
    ReorderJobsRequest,
    UpdateProductionJobRequest,
)
from shopfloor.services.production import job_response

router = APIRouter(prefix="/productionjobs", tags=["production-jobs"])


@router.get(
    "",
    summary="List production jobs",
    description="Jobs ordered by machine then queue position, optionally filtered.",
    response_model=list[ProductionJobResponse],
)
def list_production_jobs(
    service: JobServiceDep,
    _: CurrentClaims,
    machine_id: Annotated[int | None, Query(alias="machineId")] = None,
    order_id: Annotated[int | None, Query(alias="orderId")] = None,
) -> list[ProductionJobResponse]:
    return [job_response(job) for job in service.list_jobs(machine_id, order_id)]


@router.put(
    "/reorder",
    summary="Reorder a machine queue",
    description=(
        "Sets each job's sort order to its position in ``jobIds`` and, when "
        "``machineId`` is given, moves the jobs to that machine."
    ),
    response_model=list[ProductionJobResponse],
    responses={400: {"description": "Unknown job or machine"}},
)
def reorder_production_jobs(
    request: ReorderJobsRequest, service: JobServiceDep, _: CurrentClaims
) -> list[ProductionJobResponse]:
    return [job_response(job) for job in service.reorder(request)]


@router.get(
    "/{job_id}",
    summary="Get production job",
    response_model=ProductionJobResponse,
    responses={404: {"description": "Job not found"}},
)
def get_production_job(
    job_id: int, service: JobServiceDep, _: CurrentClaims
) -> ProductionJobResponse:
    return job_response(service.get_job(job_id))


@router.post(
    "",
    summary="Create production job",
    response_model=ProductionJobResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Unknown order or machine"}},
)
def create_production_job(
    request: CreateProductionJobRequest, service: JobServiceDep, _: CurrentClaims
) -> ProductionJobResponse:
    return job_response(service.create_job(request))


@router.put(
    "/{job_id}",
    summary="Update production job",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"description": "Unknown machine"}, 404: {"description": "Job not found"}},
)
def update_production_job(
    job_id: int,
    request: UpdateProductionJobRequest,
    service: JobServiceDep,
    _: CurrentClaims,
) -> Response:
    service.update_job(job_id, request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{job_id}",
    summary="Delete production job",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Job not found"}},
)
def delete_production_job(job_id: int, service: JobServiceDep, _: CurrentClaims) -> Response:
    service.delete_job(job_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
