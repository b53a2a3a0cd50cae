from fastapi.testclient import TestClient
from sqlmodel import Session

from shopfloor.models import JobStatus, MachineStatus
from shopfloor.tests.utils import API, create_job, create_machine, create_order

MACHINES = f"{API}/machines"


def test_requires_authentication(client: TestClient) -> None:
    assert client.get(MACHINES).status_code == 401


def test_list_machines_with_current_job(
    client: TestClient, db: Session, user_token_headers: dict[str, str]
) -> None:
    press = create_machine(db, name="Tire Molding Press 1", status=MachineStatus.RUNNING)
    create_machine(db, name="Quality Control Station", type="QC Station")
    create_machine(db, name="Retired Press", is_active=False)
    create_machine(db, name="Deleted Press", is_deleted=True)
    order = create_order(db)
    create_job(db, order, press, job_name="Curing", status=JobStatus.IN_PROGRESS)
    create_job(db, order, press, job_name="Next batch", sort_order=1)

    r = client.get(MACHINES, headers=user_token_headers)
    assert r.status_code == 200
    body = r.json()
    assert [m["name"] for m in body] == ["Tire Molding Press 1", "Quality Control Station"]
    assert body[0]["currentJob"] == "Curing"
    assert body[0]["status"] == "running"
    assert body[1]["currentJob"] is None
    assert body[1]["isActive"] is True


def test_get_machine(client: TestClient, db: Session, user_token_headers: dict[str, str]) -> None:
    machine = create_machine(db, notes="Primary press")
    r = client.get(f"{MACHINES}/{machine.id}", headers=user_token_headers)
    assert r.status_code == 200
    assert r.json()["notes"] == "Primary press"


def test_get_inactive_machine_is_not_found(
    client: TestClient, db: Session, user_token_headers: dict[str, str]
) -> None:
    machine = create_machine(db, is_active=False)
    assert client.get(f"{MACHINES}/{machine.id}", headers=user_token_headers).status_code == 404
    assert client.get(f"{MACHINES}/999999", headers=user_token_headers).status_code == 404


def test_update_machine_status(
    client: TestClient, db: Session, user_token_headers: dict[str, str]
) -> None:
    machine = create_machine(db, notes="Original notes")

    r = client.put(
        f"{MACHINES}/{machine.id}/status",
        json={"status": "maintenance", "utilization": 0, "notes": "Mold change"},
        headers=user_token_headers,
    )
    assert r.status_code == 204
    db.refresh(machine)
    assert machine.status == MachineStatus.MAINTENANCE
    assert machine.notes == "Mold change"

    r = client.put(
        f"{MACHINES}/{machine.id}/status",
        json={"status": "Running", "utilization": 85, "notes": ""},
        headers=user_token_headers,
    )
    assert r.status_code == 204
    db.refresh(machine)
    assert machine.status == MachineStatus.RUNNING
    assert machine.utilization == 85
    assert machine.notes == "Mold change"


def test_update_machine_status_validation(
    client: TestClient, db: Session, user_token_headers: dict[str, str]
) -> None:
    machine = create_machine(db)
    url = f"{MACHINES}/{machine.id}/status"

    r = client.put(url, json={"status": "exploded", "utilization": 10}, headers=user_token_headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Validation failed"

    r = client.put(url, json={"status": "running", "utilization": 150}, headers=user_token_headers)
    assert r.status_code == 400


def test_update_missing_machine(client: TestClient, user_token_headers: dict[str, str]) -> None:
    r = client.put(
        f"{MACHINES}/999999/status",
        json={"status": "idle", "utilization": 0},
        headers=user_token_headers,
    )
    assert r.status_code == 404
    assert r.json() == {"message": "Machine with id 999999 not found"}


def test_machine_statistics(
    client: TestClient, db: Session, user_token_headers: dict[str, str]
) -> None:
    create_machine(db, name="M1", status=MachineStatus.RUNNING, utilization=80)
    create_machine(db, name="M2", status=MachineStatus.RUNNING, utilization=65)
    create_machine(db, name="M3", status=MachineStatus.IDLE, utilization=0)
    create_machine(db, name="M4", status=MachineStatus.ERROR, utilization=10)
    create_machine(db, name="M5", status=MachineStatus.RUNNING, utilization=100, is_active=False)

    r = client.get(f"{MACHINES}/statistics", headers=user_token_headers)
    assert r.status_code == 200
    assert r.json() == {
        "totalMachines": 4,
        "runningMachines": 2,
        "idleMachines": 1,
        "maintenanceMachines": 0,
        "errorMachines": 1,
        "averageUtilization": 38.8,
    }
