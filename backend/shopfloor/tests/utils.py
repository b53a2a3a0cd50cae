import random
import string
from datetime import timedelta
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlmodel import Session

from shopfloor.core.config import settings
from shopfloor.models import Machine, ProductionJob, ProductionOrder
from shopfloor.models.base import utcnow

API = settings.API_PREFIX
TEST_PASSWORD = "Str0ng!Pass"


def random_lower_string(length: int = 12) -> str:
    return "".join(random.choices(string.ascii_lowercase, k=length))


def register_user(
    client: TestClient,
    username: str | None = None,
    email: str | None = None,
    password: str = TEST_PASSWORD,
) -> dict:
    username = username or random_lower_string()
    r = client.post(
        f"{API}/auth/register",
        json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
        },
    )
    assert r.status_code == 200, r.text
    return r.json()


def register_user_token_headers(client: TestClient) -> dict[str, str]:
    token = register_user(client)["token"]
    return {"Authorization": f"Bearer {token}"}


def create_machine(db: Session, name: str = "Press 1", **overrides) -> Machine:
    machine = Machine(name=name, type=overrides.pop("type", "Molding Press"), **overrides)
    db.add(machine)
    db.commit()
    db.refresh(machine)
    return machine


def create_order(db: Session, order_number: str = "PO-2025-900", **overrides) -> ProductionOrder:
    values = {
        "customer_name": "AutoCorp Manufacturing",
        "product_name": "All-Season Tire",
        "quantity": 100,
        "due_date": utcnow() + timedelta(days=7),
        "estimated_hours": Decimal("12.50"),
    }
    values.update(overrides)
    order = ProductionOrder(order_number=order_number, **values)
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


def create_job(
    db: Session, order: ProductionOrder, machine: Machine, job_name: str = "Curing", **overrides
) -> ProductionJob:
    job = ProductionJob(
        production_order_id=order.id,
        machine_id=machine.id,
        job_name=job_name,
        duration=overrides.pop("duration", Decimal("4.00")),
        **overrides,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job
