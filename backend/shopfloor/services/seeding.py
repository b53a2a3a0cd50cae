"""
Database seeding.

Creates missing tables and loads the tire-production reference data:
machines, sample production orders and demo jobs. Every step is a no-op when
its table already holds rows, so seeding is safe to run on every startup.
"""

import json
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

from pydantic import Field
from sqlalchemy import delete
from sqlalchemy.engine import Engine
from sqlmodel import Session, col, select

from shopfloor.application.dtos.base import CamelModel
from shopfloor.core.db import create_db_and_tables
from shopfloor.core.observability import get_logger
from shopfloor.models import (
    JobStatus,
    Machine,
    MachineStatus,
    OrderStatus,
    Priority,
    ProductionJob,
    ProductionOrder,
)
from shopfloor.models.base import utcnow

logger = get_logger(__name__)


class MachineSeed(CamelModel):
    name: str
    type: str
    status: MachineStatus = MachineStatus.IDLE
    utilization: int = Field(default=0, ge=0, le=100)
    is_active: bool = True
    last_maintenance_days_ago: int = 30
    next_maintenance_days_ahead: int = 30
    notes: str | None = None


class OrderSeed(CamelModel):
    order_number: str
    customer_name: str
    product_name: str
    quantity: int = Field(ge=1)
    priority: Priority = Priority.MEDIUM
    estimated_hours: Decimal = Decimal("0")
    status: OrderStatus = OrderStatus.PENDING
    due_date_days_ahead: int = 7
    notes: str | None = None
    created_by: str | None = None


class JobSeed(CamelModel):
    job_name: str
    order_number: str
    machine_name: str
    duration: Decimal = Decimal("0")
    status: JobStatus = JobStatus.SCHEDULED
    scheduled_start_days_ahead: int = 1
    operator: str | None = None
    notes: str | None = None
    sort_order: int = 0


def _default_machines() -> list[MachineSeed]:
    return [
        MachineSeed(
            name="Tire Molding Press 1",
            type="Molding Press",
            last_maintenance_days_ago=30,
            next_maintenance_days_ahead=30,
            notes="Primary tire molding press for passenger car tires",
        ),
        MachineSeed(
            name="Tire Molding Press 2",
            type="Molding Press",
            last_maintenance_days_ago=25,
            next_maintenance_days_ahead=35,
            notes="Secondary tire molding press for high-performance tires",
        ),
        MachineSeed(
            name="Tire Building Machine 1",
            type="Building Machine",
            last_maintenance_days_ago=20,
            next_maintenance_days_ahead=40,
            notes="Automated tire building for consistent quality",
        ),
        MachineSeed(
            name="Tread Extrusion Line 1",
            type="Extrusion Line",
            last_maintenance_days_ago=15,
            next_maintenance_days_ahead=45,
            notes="High-capacity tread extrusion for various tire sizes",
        ),
        MachineSeed(
            name="Quality Control Station",
            type="QC Station",
            last_maintenance_days_ago=10,
            next_maintenance_days_ahead=50,
            notes="Final quality inspection and testing station",
        ),
    ]


def _default_orders() -> list[OrderSeed]:
    return [
        OrderSeed(
            order_number="PO-2025-001",
            customer_name="AutoCorp Manufacturing",
            product_name="Premium All-Season Tire 205/55R16",
            quantity=1000,
            priority=Priority.HIGH,
            estimated_hours=Decimal("48.50"),
            due_date_days_ahead=7,
            notes="High-priority order for major automotive manufacturer",
        ),
        OrderSeed(
            order_number="PO-2025-002",
            customer_name="WinterTech Industries",
            product_name="Performance Winter Tire 225/45R17",
            quantity=750,
            priority=Priority.MEDIUM,
            estimated_hours=Decimal("36.25"),
            due_date_days_ahead=14,
            notes="Winter tire production for seasonal demand",
        ),
        OrderSeed(
            order_number="PO-2025-003",
            customer_name="TruckFleet Solutions",
            product_name="Commercial Truck Tire 275/70R22.5",
            quantity=500,
            priority=Priority.LOW,
            estimated_hours=Decimal("72.00"),
            due_date_days_ahead=21,
            notes="Heavy-duty commercial tire production",
        ),
    ]


def _default_jobs() -> list[JobSeed]:
    return [
        JobSeed(
            job_name="Tread extrusion",
            order_number="PO-2025-001",
            machine_name="Tread Extrusion Line 1",
            duration=Decimal("8.00"),
            scheduled_start_days_ahead=1,
            sort_order=0,
        ),
        JobSeed(
            job_name="Green tire building",
            order_number="PO-2025-001",
            machine_name="Tire Building Machine 1",
            duration=Decimal("16.00"),
            scheduled_start_days_ahead=2,
            sort_order=0,
        ),
        JobSeed(
            job_name="Curing",
            order_number="PO-2025-001",
            machine_name="Tire Molding Press 1",
            duration=Decimal("20.50"),
            scheduled_start_days_ahead=3,
            sort_order=0,
        ),
        JobSeed(
            job_name="Final inspection",
            order_number="PO-2025-001",
            machine_name="Quality Control Station",
            duration=Decimal("4.00"),
            scheduled_start_days_ahead=4,
            sort_order=0,
        ),
        JobSeed(
            job_name="Tread extrusion",
            order_number="PO-2025-002",
            machine_name="Tread Extrusion Line 1",
            duration=Decimal("6.25"),
            scheduled_start_days_ahead=2,
            sort_order=1,
        ),
        JobSeed(
            job_name="Curing",
            order_number="PO-2025-002",
            machine_name="Tire Molding Press 2",
            duration=Decimal("18.00"),
            scheduled_start_days_ahead=4,
            sort_order=0,
        ),
    ]


class SeedConfiguration(CamelModel):
    machines: list[MachineSeed] = Field(default_factory=_default_machines)
    orders: list[OrderSeed] = Field(default_factory=_default_orders)
    jobs: list[JobSeed] = Field(default_factory=_default_jobs)
    seed_relationships: bool = True
    enable_cleanup: bool = False

    @classmethod
    def from_file(cls, path: str | Path) -> "SeedConfiguration":
        """Load a camelCase JSON seed file; omitted sections keep the defaults."""
        with open(path, encoding="utf-8") as f:
            return cls.model_validate(json.load(f))


class DatabaseSeedingService:
    def __init__(
        self,
        session: Session,
        config: SeedConfiguration | None = None,
        engine: Engine | None = None,
    ) -> None:
        self.session = session
        self.config = config or SeedConfiguration()
        self.engine = engine

    def _has_rows(self, model: type) -> bool:
        return self.session.exec(select(model.id).limit(1)).first() is not None

    def migrate_database(self) -> None:
        create_db_and_tables(self.engine or self.session.get_bind())
        logger.info("Database schema is up to date")

    def seed_tire_production_machines(self) -> int:
        if self._has_rows(Machine):
            logger.info("Machines already exist in database, skipping seeding")
            return 0

        now = utcnow()
        machines = [
            Machine(
                name=seed.name,
                type=seed.type,
                status=seed.status,
                utilization=seed.utilization,
                is_active=seed.is_active,
                last_maintenance=now - timedelta(days=seed.last_maintenance_days_ago),
                next_maintenance=now + timedelta(days=seed.next_maintenance_days_ahead),
                notes=seed.notes,
            )
            for seed in self.config.machines
        ]
        self.session.add_all(machines)
        self.session.commit()
        logger.info("Seeded tire production machines", count=len(machines))
        return len(machines)

    def seed_production_orders(self) -> int:
        if self._has_rows(ProductionOrder):
            logger.info("Production orders already exist in database, skipping seeding")
            return 0

        now = utcnow()
        orders = [
            ProductionOrder(
                order_number=seed.order_number,
                customer_name=seed.customer_name,
                product_name=seed.product_name,
                quantity=seed.quantity,
                priority=seed.priority,
                estimated_hours=seed.estimated_hours,
                status=seed.status,
                due_date=now + timedelta(days=seed.due_date_days_ahead),
                created_date=now,
                notes=seed.notes,
                created_by=seed.created_by,
            )
            for seed in self.config.orders
        ]
        self.session.add_all(orders)
        self.session.commit()
        logger.info("Seeded sample production orders", count=len(orders))
        return len(orders)

    def seed_production_jobs(self) -> int:
        if not self.config.seed_relationships:
            return 0
        if self._has_rows(ProductionJob):
            logger.info("Production jobs already exist in database, skipping seeding")
            return 0

        orders = {
            o.order_number: o
            for o in self.session.exec(
                select(ProductionOrder).where(
                    col(ProductionOrder.order_number).in_(
                        [seed.order_number for seed in self.config.jobs]
                    )
                )
            ).all()
        }
        machines = {
            m.name: m
            for m in self.session.exec(
                select(Machine).where(
                    col(Machine.name).in_([seed.machine_name for seed in self.config.jobs])
                )
            ).all()
        }

        now = utcnow()
        jobs = []
        for seed in self.config.jobs:
            order = orders.get(seed.order_number)
            machine = machines.get(seed.machine_name)
            if order is None or machine is None:
                logger.warning(
                    "Skipping seed job with unknown reference",
                    job_name=seed.job_name,
                    order_number=seed.order_number,
                    machine_name=seed.machine_name,
                )
                continue
            start = now + timedelta(days=seed.scheduled_start_days_ahead)
            jobs.append(
                ProductionJob(
                    production_order_id=order.id,
                    machine_id=machine.id,
                    job_name=seed.job_name,
                    duration=seed.duration,
                    status=seed.status,
                    scheduled_start_time=start,
                    scheduled_end_time=start + timedelta(hours=float(seed.duration)),
                    operator=seed.operator,
                    notes=seed.notes,
                    sort_order=seed.sort_order,
                )
            )

        self.session.add_all(jobs)
        self.session.commit()
        logger.info("Seeded demo production jobs", count=len(jobs))
        return len(jobs)

    def seed_database(self) -> None:
        logger.info("Starting database seeding process")
        try:
            self.migrate_database()
            if self.config.enable_cleanup:
                self.clean_seed_data()
            self.seed_tire_production_machines()
            self.seed_production_orders()
            self.seed_production_jobs()
        except Exception:
            logger.exception("Error occurred during database seeding")
            raise
        logger.info("Database seeding completed successfully")

    def seed_for_environment(self, environment: str) -> None:
        """Production only receives machines; every other environment gets everything."""
        if environment == "production":
            self.migrate_database()
            self.seed_tire_production_machines()
            return
        self.seed_database()

    def clean_seed_data(self) -> None:
        """Physically remove rows that match the seed configuration."""
        order_numbers = [seed.order_number for seed in self.config.orders]
        machine_names = [seed.name for seed in self.config.machines]

        order_ids = select(ProductionOrder.id).where(
            col(ProductionOrder.order_number).in_(order_numbers)
        )
        machine_ids = select(Machine.id).where(col(Machine.name).in_(machine_names))

        # Jobs first: machines are protected by ON DELETE RESTRICT
        self.session.execute(
            delete(ProductionJob).where(
                col(ProductionJob.production_order_id).in_(order_ids)
                | col(ProductionJob.machine_id).in_(machine_ids)
            )
        )
        self.session.execute(
            delete(ProductionOrder).where(col(ProductionOrder.order_number).in_(order_numbers))
        )
        self.session.execute(delete(Machine).where(col(Machine.name).in_(machine_names)))
        self.session.commit()
        logger.info("Removed seed data")


def load_seed_configuration(path: str | None) -> SeedConfiguration:
    if not path:
        return SeedConfiguration()
    logger.info("Loading seed configuration", path=path)
    return SeedConfiguration.from_file(path)
