"""Production SQLModel tables: machines, production orders and production jobs."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index
from sqlmodel import Field, Relationship, SQLModel

from .base import JobStatus, MachineStatus, OrderStatus, Priority, utcnow


class SoftDeleteModel(SQLModel):
    """Audit timestamps and the soft-delete flag shared by production tables."""

    created_date: datetime = Field(default_factory=utcnow, sa_type=DateTime())
    updated_date: datetime | None = Field(
        default=None, sa_type=DateTime(), sa_column_kwargs={"onupdate": utcnow}
    )
    is_deleted: bool = Field(default=False, index=True)
    deleted_date: datetime | None = Field(default=None, sa_type=DateTime())

    def mark_deleted(self) -> None:
        self.is_deleted = True
        self.deleted_date = utcnow()


class Machine(SoftDeleteModel, table=True):
    """
    Machine table model.

    Production equipment that jobs are scheduled on.
    """

    __tablename__ = "machines"
    __table_args__ = (
        Index("ix_machines_status_type", "status", "type"),
        Index("ix_machines_is_active_type", "is_active", "type"),
    )

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=50, unique=True, index=True)
    type: str = Field(max_length=50)
    status: MachineStatus = Field(default=MachineStatus.IDLE)
    utilization: int = Field(default=0, ge=0, le=100)
    last_maintenance: datetime | None = Field(default=None, sa_type=DateTime())
    next_maintenance: datetime | None = Field(default=None, sa_type=DateTime())
    notes: str | None = Field(default=None, max_length=500)
    is_active: bool = Field(default=True)

    production_jobs: list["ProductionJob"] = Relationship(back_populates="machine")


class ProductionOrder(SoftDeleteModel, table=True):
    """
    ProductionOrder table model.

    A customer order; the work needed to fulfil it is split into jobs.
    """

    __tablename__ = "production_orders"
    __table_args__ = (
        Index("ix_production_orders_status_due_date", "status", "due_date"),
        Index("ix_production_orders_status_priority", "status", "priority"),
        Index("ix_production_orders_created_date_status", "created_date", "status"),
    )

    id: int | None = Field(default=None, primary_key=True)
    order_number: str = Field(max_length=50, unique=True, index=True)
    customer_name: str = Field(max_length=100)
    product_name: str = Field(max_length=100)
    quantity: int = Field(ge=1)
    due_date: datetime = Field(sa_type=DateTime())
    priority: Priority = Field(default=Priority.MEDIUM)
    status: OrderStatus = Field(default=OrderStatus.PENDING)
    progress: int = Field(default=0, ge=0, le=100)
    estimated_hours: Decimal = Field(
        default=Decimal("0"), max_digits=10, decimal_places=2
    )
    assigned_machine: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=500)
    start_date: datetime | None = Field(default=None, sa_type=DateTime())
    completed_date: datetime | None = Field(default=None, sa_type=DateTime())
    created_by: str | None = Field(default=None, max_length=50)

    production_jobs: list["ProductionJob"] = Relationship(
        back_populates="production_order", cascade_delete=True
    )

    @property
    def is_overdue(self) -> bool:
        return self.due_date < utcnow() and self.status not in (
            OrderStatus.COMPLETED,
            OrderStatus.CANCELLED,
        )

    @property
    def days_until_due(self) -> int:
        # Truncates toward zero: due in 36h -> 1, overdue by 36h -> -1
        return int((self.due_date - utcnow()).total_seconds() / 86400)


class ProductionJob(SoftDeleteModel, table=True):
    """
    ProductionJob table model.

    One step of an order, run on a machine. ``sort_order`` is the position in
    the machine's queue and is rewritten by the drag-and-drop scheduler.
    """

    __tablename__ = "production_jobs"
    __table_args__ = (
        Index(
            "ix_production_jobs_status_scheduled_start_time",
            "status",
            "scheduled_start_time",
        ),
        Index("ix_production_jobs_machine_id_status", "machine_id", "status"),
    )

    id: int | None = Field(default=None, primary_key=True)
    production_order_id: int = Field(
        foreign_key="production_orders.id", ondelete="CASCADE", index=True
    )
    job_name: str = Field(max_length=100)
    machine_id: int = Field(foreign_key="machines.id", ondelete="RESTRICT")
    duration: Decimal = Field(
        default=Decimal("0"), ge=0, max_digits=10, decimal_places=2
    )
    status: JobStatus = Field(default=JobStatus.SCHEDULED)
    scheduled_start_time: datetime | None = Field(default=None, sa_type=DateTime())
    scheduled_end_time: datetime | None = Field(default=None, sa_type=DateTime())
    actual_start_time: datetime | None = Field(default=None, sa_type=DateTime())
    actual_end_time: datetime | None = Field(default=None, sa_type=DateTime())
    operator: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=500)
    sort_order: int = Field(default=0)

    production_order: ProductionOrder = Relationship(back_populates="production_jobs")
    machine: Machine = Relationship(back_populates="production_jobs")
