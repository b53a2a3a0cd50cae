"""
Production scheduling services.

CRUD and statistics for production orders, machines and production jobs.
Soft-deleted rows are invisible to every read. Services raise
``EntityNotFoundError`` / ``ValidationError``; the app-level handlers map them to 404 / 400.
"""

from collections.abc import Sequence
from datetime import datetime

from sqlmodel import Session, col, func, select

from shopfloor.application.dtos import (
    CreateProductionJobRequest,
    CreateProductionOrderRequest,
    MachineResponse,
    MachineStatisticsResponse,
    OrderStatisticsResponse,
    ProductionJobResponse,
    ProductionOrderResponse,
    ReorderJobsRequest,
    UpdateMachineStatusRequest,
    UpdateProductionJobRequest,
    UpdateProductionOrderRequest,
)
from shopfloor.core.exceptions import EntityNotFoundError, ValidationError
from shopfloor.core.observability import get_logger
from shopfloor.models import (
    JobStatus,
    Machine,
    MachineStatus,
    OrderStatus,
    ProductionJob,
    ProductionOrder,
)
from shopfloor.models.base import utcnow

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Response mapping
# ---------------------------------------------------------------------------


def job_response(job: ProductionJob) -> ProductionJobResponse:
    return ProductionJobResponse(
        id=job.id,
        production_order_id=job.production_order_id,
        order_number=job.production_order.order_number if job.production_order else None,
        job_name=job.job_name,
        machine_id=job.machine_id,
        machine_name=job.machine.name if job.machine else "",
        duration=float(job.duration),
        status=job.status,
        scheduled_start_time=job.scheduled_start_time,
        scheduled_end_time=job.scheduled_end_time,
        actual_start_time=job.actual_start_time,
        actual_end_time=job.actual_end_time,
        operator=job.operator,
        notes=job.notes,
        sort_order=job.sort_order,
    )


def order_response(order: ProductionOrder) -> ProductionOrderResponse:
    jobs = sorted(
        (job for job in order.production_jobs if not job.is_deleted),
        key=lambda job: (job.sort_order, job.id),
    )
    return ProductionOrderResponse(
        id=order.id,
        order_number=order.order_number,
        customer_name=order.customer_name,
        product_name=order.product_name,
        quantity=order.quantity,
        due_date=order.due_date,
        priority=order.priority,
        status=order.status,
        progress=order.progress,
        estimated_hours=float(order.estimated_hours),
        assigned_machine=order.assigned_machine,
        notes=order.notes,
        created_date=order.created_date,
        start_date=order.start_date,
        completed_date=order.completed_date,
        created_by=order.created_by,
        days_until_due=order.days_until_due,
        is_overdue=order.is_overdue,
        production_jobs=[job_response(job) for job in jobs],
    )


def _mean(values: Sequence[int | float]) -> float:
    # round() rounds halves to even
    return round(sum(values) / len(values), 1) if values else 0.0


# ---------------------------------------------------------------------------
# Production orders
# ---------------------------------------------------------------------------


class ProductionOrderService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _active_orders(self) -> Sequence[ProductionOrder]:
        statement = (
            select(ProductionOrder)
            .where(col(ProductionOrder.is_deleted).is_(False))
            .order_by(col(ProductionOrder.created_date).desc(), col(ProductionOrder.id).desc())
        )
        return self.session.exec(statement).all()

    def get_order(self, order_id: int) -> ProductionOrder:
        order = self.session.get(ProductionOrder, order_id)
        if order is None or order.is_deleted:
            raise EntityNotFoundError("ProductionOrder", order_id)
        return order

    def list_orders(self) -> list[ProductionOrderResponse]:
        return [order_response(order) for order in self._active_orders()]

    def next_order_number(self, now: datetime | None = None) -> str:
        """``PO-{year}-{n:03d}``, n starting at the total row count plus one."""
        year = (now or utcnow()).year
        n = self.session.exec(select(func.count()).select_from(ProductionOrder)).one() + 1
        while True:
            candidate = f"PO-{year}-{n:03d}"
            exists = self.session.exec(
                select(ProductionOrder.id).where(ProductionOrder.order_number == candidate)
            ).first()
            if exists is None:
                return candidate
            n += 1

    def create_order(
        self, request: CreateProductionOrderRequest, created_by: str | None = None
    ) -> ProductionOrder:
        order = ProductionOrder(
            order_number=self.next_order_number(),
            customer_name=request.customer_name,
            product_name=request.product_name,
            quantity=request.quantity,
            due_date=request.due_date,
            priority=request.priority,
            status=OrderStatus.PENDING,
            progress=0,
            estimated_hours=request.estimated_hours,
            notes=request.notes,
            created_by=created_by or "System",
        )
        self.session.add(order)
        self.session.commit()
        self.session.refresh(order)
        logger.info(
            "Production order created",
            order_id=order.id,
            order_number=order.order_number,
        )
        return order

    def update_order(self, order_id: int, request: UpdateProductionOrderRequest) -> ProductionOrder:
        order = self.get_order(order_id)

        if request.customer_name is not None:
            order.customer_name = request.customer_name
        if request.product_name is not None:
            order.product_name = request.product_name
        if request.quantity is not None:
            order.quantity = request.quantity
        if request.due_date is not None:
            order.due_date = request.due_date
        if request.priority is not None:
            order.priority = request.priority
        if request.estimated_hours is not None:
            order.estimated_hours = request.estimated_hours
        if request.assigned_machine is not None:
            order.assigned_machine = request.assigned_machine
        if request.notes is not None:
            order.notes = request.notes

        if request.status is not None:
            order.status = request.status
            if request.status == OrderStatus.IN_PROGRESS and order.start_date is None:
                order.start_date = utcnow()
            elif request.status == OrderStatus.COMPLETED:
                if order.completed_date is None:
                    order.completed_date = utcnow()
                    order.progress = 100

        # An explicit progress wins over the completion default
        if request.progress is not None:
            order.progress = request.progress

        order.updated_date = utcnow()
        self.session.add(order)
        self.session.commit()
        self.session.refresh(order)
        return order

    def delete_order(self, order_id: int) -> None:
        """Soft-delete the order together with its jobs."""
        order = self.get_order(order_id)
        order.mark_deleted()
        for job in order.production_jobs:
            if not job.is_deleted:
                job.mark_deleted()
                self.session.add(job)
        self.session.add(order)
        self.session.commit()
        logger.info("Production order deleted", order_id=order_id)

    def statistics(self) -> OrderStatisticsResponse:
        orders = self._active_orders()
        today = utcnow().date()

        def count(status: OrderStatus) -> int:
            return sum(1 for order in orders if order.status == status)

        in_progress = [o.progress for o in orders if o.status == OrderStatus.IN_PROGRESS]
        completed_today = sum(
            1
            for o in orders
            if o.status == OrderStatus.COMPLETED
            and o.completed_date is not None
            and o.completed_date.date() == today
        )
        return OrderStatisticsResponse(
            total_orders=len(orders),
            active_orders=len(in_progress),
            completed_orders=count(OrderStatus.COMPLETED),
            pending_orders=count(OrderStatus.PENDING),
            delayed_orders=count(OrderStatus.DELAYED),
            completed_today=completed_today,
            efficiency=_mean(in_progress),
        )


# ---------------------------------------------------------------------------
# Machines
# ---------------------------------------------------------------------------


class MachineService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _active_machines(self) -> Sequence[Machine]:
        statement = (
            select(Machine)
            .where(col(Machine.is_active).is_(True), col(Machine.is_deleted).is_(False))
            .order_by(col(Machine.id))
        )
        return self.session.exec(statement).all()

    def get_machine(self, machine_id: int) -> Machine:
        machine = self.session.get(Machine, machine_id)
        if machine is None or not machine.is_active or machine.is_deleted:
            raise EntityNotFoundError("Machine", machine_id)
        return machine

    def current_job_name(self, machine: Machine) -> str | None:
        statement = (
            select(ProductionJob.job_name)
            .where(
                ProductionJob.machine_id == machine.id,
                ProductionJob.status == JobStatus.IN_PROGRESS,
                col(ProductionJob.is_deleted).is_(False),
            )
            .order_by(col(ProductionJob.sort_order), col(ProductionJob.id))
        )
        return self.session.exec(statement).first()

    def machine_response(self, machine: Machine) -> MachineResponse:
        response = MachineResponse.model_validate(machine)
        response.current_job = self.current_job_name(machine)
        return response

    def list_machines(self) -> list[MachineResponse]:
        return [self.machine_response(machine) for machine in self._active_machines()]

    def update_status(self, machine_id: int, request: UpdateMachineStatusRequest) -> Machine:
        machine = self.get_machine(machine_id)
        machine.status = request.status
        machine.utilization = request.utilization
        if request.notes:
            machine.notes = request.notes
        machine.updated_date = utcnow()
        self.session.add(machine)
        self.session.commit()
        self.session.refresh(machine)
        logger.info(
            "Machine status updated",
            machine_id=machine_id,
            status=machine.status.value,
            utilization=machine.utilization,
        )
        return machine

    def statistics(self) -> MachineStatisticsResponse:
        machines = self._active_machines()

        def count(status: MachineStatus) -> int:
            return sum(1 for machine in machines if machine.status == status)

        return MachineStatisticsResponse(
            total_machines=len(machines),
            running_machines=count(MachineStatus.RUNNING),
            idle_machines=count(MachineStatus.IDLE),
            maintenance_machines=count(MachineStatus.MAINTENANCE),
            error_machines=count(MachineStatus.ERROR),
            average_utilization=_mean([m.utilization for m in machines]),
        )


# ---------------------------------------------------------------------------
# Production jobs
# ---------------------------------------------------------------------------


class ProductionJobService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_job(self, job_id: int) -> ProductionJob:
        job = self.session.get(ProductionJob, job_id)
        if job is None or job.is_deleted:
            raise EntityNotFoundError("ProductionJob", job_id)
        return job

    def list_jobs(
        self, machine_id: int | None = None, order_id: int | None = None
    ) -> list[ProductionJob]:
        statement = select(ProductionJob).where(col(ProductionJob.is_deleted).is_(False))
        if machine_id is not None:
            statement = statement.where(ProductionJob.machine_id == machine_id)
        if order_id is not None:
            statement = statement.where(ProductionJob.production_order_id == order_id)
        statement = statement.order_by(
            col(ProductionJob.machine_id),
            col(ProductionJob.sort_order),
            col(ProductionJob.id),
        )
        return list(self.session.exec(statement).all())

    def _require_order(self, order_id: int) -> ProductionOrder:
        order = self.session.get(ProductionOrder, order_id)
        if order is None or order.is_deleted:
            raise ValidationError(f"Production order {order_id} does not exist")
        return order

    def _require_machine(self, machine_id: int) -> Machine:
        machine = self.session.get(Machine, machine_id)
        if machine is None or not machine.is_active or machine.is_deleted:
            raise ValidationError(f"Machine {machine_id} does not exist")
        return machine

    def next_sort_order(self, machine_id: int) -> int:
        current_max = self.session.exec(
            select(func.max(ProductionJob.sort_order)).where(
                ProductionJob.machine_id == machine_id,
                col(ProductionJob.is_deleted).is_(False),
            )
        ).one()
        return 0 if current_max is None else current_max + 1

    def create_job(self, request: CreateProductionJobRequest) -> ProductionJob:
        self._require_order(request.production_order_id)
        self._require_machine(request.machine_id)

        sort_order = request.sort_order
        if sort_order is None:
            sort_order = self.next_sort_order(request.machine_id)

        job = ProductionJob(
            production_order_id=request.production_order_id,
            job_name=request.job_name,
            machine_id=request.machine_id,
            duration=request.duration,
            status=request.status,
            scheduled_start_time=request.scheduled_start_time,
            scheduled_end_time=request.scheduled_end_time,
            operator=request.operator,
            notes=request.notes,
            sort_order=sort_order,
        )
        self.session.add(job)
        self.session.commit()
        self.session.refresh(job)
        logger.info("Production job created", job_id=job.id, machine_id=job.machine_id)
        return job

    def update_job(self, job_id: int, request: UpdateProductionJobRequest) -> ProductionJob:
        job = self.get_job(job_id)

        if request.machine_id is not None and request.machine_id != job.machine_id:
            self._require_machine(request.machine_id)
            job.machine_id = request.machine_id
        if request.job_name is not None:
            job.job_name = request.job_name
        if request.duration is not None:
            job.duration = request.duration
        if request.scheduled_start_time is not None:
            job.scheduled_start_time = request.scheduled_start_time
        if request.scheduled_end_time is not None:
            job.scheduled_end_time = request.scheduled_end_time
        if request.actual_start_time is not None:
            job.actual_start_time = request.actual_start_time
        if request.actual_end_time is not None:
            job.actual_end_time = request.actual_end_time
        if request.operator is not None:
            job.operator = request.operator
        if request.notes is not None:
            job.notes = request.notes
        if request.sort_order is not None:
            job.sort_order = request.sort_order

        if request.status is not None:
            job.status = request.status
            if request.status == JobStatus.IN_PROGRESS and job.actual_start_time is None:
                job.actual_start_time = utcnow()
            elif request.status == JobStatus.COMPLETED and job.actual_end_time is None:
                job.actual_end_time = utcnow()

        job.updated_date = utcnow()
        self.session.add(job)
        self.session.commit()
        self.session.refresh(job)
        return job

    def delete_job(self, job_id: int) -> None:
        job = self.get_job(job_id)
        job.mark_deleted()
        self.session.add(job)
        self.session.commit()
        logger.info("Production job deleted", job_id=job_id)

    def reorder(self, request: ReorderJobsRequest) -> list[ProductionJob]:
        """Persist a drag-and-drop queue: ``sort_order`` becomes the list position."""
        if request.machine_id is not None:
            self._require_machine(request.machine_id)

        jobs = self.session.exec(
            select(ProductionJob).where(
                col(ProductionJob.id).in_(request.job_ids),
                col(ProductionJob.is_deleted).is_(False),
            )
        ).all()
        by_id = {job.id: job for job in jobs}
        unknown = [job_id for job_id in request.job_ids if job_id not in by_id]
        if unknown:
            raise ValidationError(
                "Unknown production job ids",
                [f"Production job {job_id} does not exist" for job_id in unknown],
            )

        now = utcnow()
        ordered = [by_id[job_id] for job_id in request.job_ids]
        for position, job in enumerate(ordered):
            job.sort_order = position
            if request.machine_id is not None:
                job.machine_id = request.machine_id
            job.updated_date = now
            self.session.add(job)
        self.session.commit()
        for job in ordered:
            self.session.refresh(job)

        logger.info(
            "Production jobs reordered",
            machine_id=request.machine_id,
            job_count=len(ordered),
        )
        return ordered
