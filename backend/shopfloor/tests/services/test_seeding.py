import json
from decimal import Decimal
from pathlib import Path

from sqlmodel import Session, func, select

from shopfloor.core.db import engine
from shopfloor.models import Machine, MachineStatus, Priority, ProductionJob, ProductionOrder
from shopfloor.services.seeding import (
    DatabaseSeedingService,
    SeedConfiguration,
    load_seed_configuration,
)


def count(db: Session, model: type) -> int:
    return db.exec(select(func.count()).select_from(model)).one()


def test_default_configuration_is_the_tire_dataset() -> None:
    config = SeedConfiguration()
    assert [m.name for m in config.machines] == [
        "Tire Molding Press 1",
        "Tire Molding Press 2",
        "Tire Building Machine 1",
        "Tread Extrusion Line 1",
        "Quality Control Station",
    ]
    assert [o.order_number for o in config.orders] == ["PO-2025-001", "PO-2025-002", "PO-2025-003"]


def test_seed_database_loads_everything(db: Session) -> None:
    DatabaseSeedingService(db, engine=engine).seed_database()

    assert count(db, Machine) == 5
    assert count(db, ProductionOrder) == 3
    assert count(db, ProductionJob) == len(SeedConfiguration().jobs)

    press = db.exec(select(Machine).where(Machine.name == "Tire Molding Press 1")).one()
    assert press.status == MachineStatus.IDLE
    assert press.utilization == 0
    assert press.last_maintenance < press.next_maintenance

    order = db.exec(
        select(ProductionOrder).where(ProductionOrder.order_number == "PO-2025-001")
    ).one()
    assert order.priority == Priority.HIGH
    assert order.estimated_hours == Decimal("48.50")


def test_seeding_is_idempotent(db: Session) -> None:
    service = DatabaseSeedingService(db, engine=engine)
    service.seed_database()
    service.seed_database()

    assert count(db, Machine) == 5
    assert count(db, ProductionOrder) == 3


def test_machines_are_not_seeded_when_any_exist(db: Session) -> None:
    db.add(Machine(name="Existing Press", type="Molding Press"))
    db.commit()

    assert DatabaseSeedingService(db).seed_tire_production_machines() == 0
    assert count(db, Machine) == 1


def test_production_environment_seeds_machines_only(db: Session) -> None:
    DatabaseSeedingService(db, engine=engine).seed_for_environment("production")

    assert count(db, Machine) == 5
    assert count(db, ProductionOrder) == 0
    assert count(db, ProductionJob) == 0


def test_other_environments_seed_everything(db: Session) -> None:
    DatabaseSeedingService(db, engine=engine).seed_for_environment("staging")

    assert count(db, Machine) == 5
    assert count(db, ProductionOrder) == 3


def test_relationship_seeding_can_be_disabled(db: Session) -> None:
    config = SeedConfiguration(seed_relationships=False)
    DatabaseSeedingService(db, config, engine).seed_database()

    assert count(db, ProductionOrder) == 3
    assert count(db, ProductionJob) == 0


def test_clean_seed_data_removes_seeded_rows(db: Session) -> None:
    service = DatabaseSeedingService(db, engine=engine)
    service.seed_database()
    db.add(Machine(name="Customer Machine", type="Mixer"))
    db.commit()

    service.clean_seed_data()

    assert count(db, ProductionJob) == 0
    assert count(db, ProductionOrder) == 0
    assert db.exec(select(Machine.name)).all() == ["Customer Machine"]


def test_cleanup_before_reseeding_restores_defaults(db: Session) -> None:
    DatabaseSeedingService(db, engine=engine).seed_database()
    press = db.exec(select(Machine).where(Machine.name == "Tire Molding Press 1")).one()
    press.status = MachineStatus.ERROR
    db.add(press)
    db.commit()

    config = SeedConfiguration(enable_cleanup=True)
    DatabaseSeedingService(db, config, engine=engine).seed_database()

    db.expire_all()
    press = db.exec(select(Machine).where(Machine.name == "Tire Molding Press 1")).one()
    assert press.status == MachineStatus.IDLE
    assert count(db, Machine) == 5
    assert count(db, ProductionOrder) == 3


def test_configuration_file_replaces_defaults(db: Session, tmp_path: Path) -> None:
    seed_file = tmp_path / "seed.json"
    seed_file.write_text(
        json.dumps(
            {
                "machines": [
                    {"name": "Mixer 1", "type": "Banbury Mixer", "status": "Running", "utilization": 40}
                ],
                "orders": [
                    {
                        "orderNumber": "PO-2030-001",
                        "customerName": "Fleet Co",
                        "productName": "Truck Tire",
                        "quantity": 10,
                        "priority": "High",
                        "dueDateDaysAhead": 3,
                    }
                ],
                "jobs": [
                    {
                        "jobName": "Mixing",
                        "orderNumber": "PO-2030-001",
                        "machineName": "Mixer 1",
                        "duration": 2.5,
                    }
                ],
            }
        )
    )

    config = load_seed_configuration(str(seed_file))
    DatabaseSeedingService(db, config, engine).seed_database()

    machine = db.exec(select(Machine)).one()
    assert machine.name == "Mixer 1"
    assert machine.status == MachineStatus.RUNNING
    order = db.exec(select(ProductionOrder)).one()
    assert order.priority == Priority.HIGH
    job = db.exec(select(ProductionJob)).one()
    assert job.machine_id == machine.id
    assert job.production_order_id == order.id


def test_jobs_with_unknown_references_are_skipped(db: Session) -> None:
    config = SeedConfiguration(
        jobs=[{"jobName": "Ghost", "orderNumber": "PO-1999-001", "machineName": "Nowhere"}]
    )
    DatabaseSeedingService(db, config, engine).seed_database()
    assert count(db, ProductionJob) == 0
