"""
Production Data Transfer Objects.

Requests and responses for production orders, production jobs and machines.
Field names are camelCase on the wire (``orderNumber``, ``daysUntilDue``).
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import (
    AfterValidator,
    BeforeValidator,
    Field,
    StringConstraints,
    field_validator,
)

from shopfloor.models.base import JobStatus, MachineStatus, OrderStatus, Priority

from .base import CamelModel, blank_to_none, naive_utc

OptionalName = Annotated[
    Annotated[str, StringConstraints(max_length=100)] | None,
    BeforeValidator(blank_to_none),
]
UtcDateTime = Annotated[datetime, AfterValidator(naive_utc)]
OptionalUtcDateTime = Annotated[datetime | None, AfterValidator(naive_utc)]


# ---------------------------------------------------------------------------
# Production jobs
# ---------------------------------------------------------------------------


class ProductionJobResponse(CamelModel):
    id: int
    production_order_id: int
    order_number: str | None = None
    job_name: str
    machine_id: int
    machine_name: str = ""
    duration: float
    status: JobStatus
    scheduled_start_time: datetime | None = None
    scheduled_end_time: datetime | None = None
    actual_start_time: datetime | None = None
    actual_end_time: datetime | None = None
    operator: str | None = None
    notes: str | None = None
    sort_order: int


class CreateProductionJobRequest(CamelModel):
    production_order_id: int
    job_name: str = Field(min_length=1, max_length=100)
    machine_id: int
    duration: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    status: JobStatus = JobStatus.SCHEDULED
    scheduled_start_time: OptionalUtcDateTime = None
    scheduled_end_time: OptionalUtcDateTime = None
    operator: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=500)
    sort_order: int | None = None


class UpdateProductionJobRequest(CamelModel):
    job_name: OptionalName = None
    machine_id: int | None = None
    duration: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    status: Annotated[JobStatus | None, BeforeValidator(blank_to_none)] = None
    scheduled_start_time: OptionalUtcDateTime = None
    scheduled_end_time: OptionalUtcDateTime = None
    actual_start_time: OptionalUtcDateTime = None
    actual_end_time: OptionalUtcDateTime = None
    operator: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=500)
    sort_order: int | None = None


class ReorderJobsRequest(CamelModel):
    """New queue order for a machine, as produced by the drag-and-drop view."""

    machine_id: int | None = None
    job_ids: list[int] = Field(min_length=1)

    @field_validator("job_ids")
    @classmethod
    def validate_unique(cls, v: list[int]) -> list[int]:
        if len(set(v)) != len(v):
            raise ValueError("jobIds must not contain duplicates")
        return v


# ---------------------------------------------------------------------------
# Production orders
# ---------------------------------------------------------------------------


class ProductionOrderResponse(CamelModel):
    id: int
    order_number: str
    customer_name: str
    product_name: str
    quantity: int
    due_date: datetime
    priority: Priority
    status: OrderStatus
    progress: int
    estimated_hours: float
    assigned_machine: str | None = None
    notes: str | None = None
    created_date: datetime
    start_date: datetime | None = None
    completed_date: datetime | None = None
    created_by: str | None = None
    days_until_due: int
    is_overdue: bool
    production_jobs: list[ProductionJobResponse] = []


class CreateProductionOrderRequest(CamelModel):
    customer_name: str = Field(min_length=1, max_length=100)
    product_name: str = Field(min_length=1, max_length=100)
    quantity: int = Field(ge=1)
    due_date: UtcDateTime
    priority: Priority = Priority.MEDIUM
    estimated_hours: Decimal = Field(
        default=Decimal("0"), ge=0, max_digits=10, decimal_places=2
    )
    notes: str | None = Field(default=None, max_length=500)

    model_config = CamelModel.model_config | {
        "json_schema_extra": {
            "example": {
                "customerName": "AutoCorp Manufacturing",
                "productName": "Premium All-Season Tire 205/55R16",
                "quantity": 1000,
                "dueDate": "2025-07-15T00:00:00Z",
                "priority": "high",
                "estimatedHours": 48.5,
                "notes": "Rush order",
            }
        }
    }


class UpdateProductionOrderRequest(CamelModel):
    """Every field is optional; only the fields provided are changed."""

    customer_name: OptionalName = None
    product_name: OptionalName = None
    quantity: int | None = Field(default=None, ge=1)
    due_date: OptionalUtcDateTime = None
    priority: Annotated[Priority | None, BeforeValidator(blank_to_none)] = None
    status: Annotated[OrderStatus | None, BeforeValidator(blank_to_none)] = None
    progress: int | None = Field(default=None, ge=0, le=100)
    estimated_hours: Decimal | None = Field(
        default=None, ge=0, max_digits=10, decimal_places=2
    )
    assigned_machine: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=500)


class OrderStatisticsResponse(CamelModel):
    total_orders: int
    active_orders: int
    completed_orders: int
    pending_orders: int
    delayed_orders: int
    completed_today: int
    efficiency: float


# ---------------------------------------------------------------------------
# Machines
# ---------------------------------------------------------------------------


class MachineResponse(CamelModel):
    id: int
    name: str
    type: str
    status: MachineStatus
    utilization: int
    last_maintenance: datetime | None = None
    next_maintenance: datetime | None = None
    notes: str | None = None
    is_active: bool
    current_job: str | None = None


class UpdateMachineStatusRequest(CamelModel):
    status: MachineStatus
    utilization: int = Field(default=0, ge=0, le=100)
    notes: str | None = Field(default=None, max_length=500)


class MachineStatisticsResponse(CamelModel):
    total_machines: int
    running_machines: int
    idle_machines: int
    maintenance_machines: int
    error_machines: int
    average_utilization: float
