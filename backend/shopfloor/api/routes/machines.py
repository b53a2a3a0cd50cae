"""
Machines API Routes.

Machine listing, status updates and utilization statistics.
"""

from fastapi import APIRouter, Response, status

from shopfloor.api.deps import CurrentClaims, MachineServiceDep
from shopfloor.application.dtos import (
    MachineResponse,
    MachineStatisticsResponse,
    UpdateMachineStatusRequest,
)

router = APIRouter(prefix="/machines", tags=["machines"])


@router.get(
    "",
    summary="List machines",
    description="Active machines with the name of the job currently running on each.",
    response_model=list[MachineResponse],
)
def list_machines(service: MachineServiceDep, _: CurrentClaims) -> list[MachineResponse]:
    return service.list_machines()


@router.get(
    "/statistics",
    summary="Machine statistics",
    response_model=MachineStatisticsResponse,
)
def get_machine_statistics(
    service: MachineServiceDep, _: CurrentClaims
) -> MachineStatisticsResponse:
    return service.statistics()


@router.get(
    "/{machine_id}",
    summary="Get machine",
    response_model=MachineResponse,
    responses={404: {"description": "Machine not found"}},
)
def get_machine(machine_id: int, service: MachineServiceDep, _: CurrentClaims) -> MachineResponse:
    return service.machine_response(service.get_machine(machine_id))


@router.put(
    "/{machine_id}/status",
    summary="Update machine status",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        400: {"description": "Invalid status or utilization"},
        404: {"description": "Machine not found"},
    },
)
def update_machine_status(
    machine_id: int,
    request: UpdateMachineStatusRequest,
    service: MachineServiceDep,
    _: CurrentClaims,
) -> Response:
    service.update_status(machine_id, request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
