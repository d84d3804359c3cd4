import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from warehousing.api import (
    adjustment_router,
    register_error_handlers,
    report_router,
    transfer_router,
    warehouse_router,
)


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(warehouse_router)
    app.include_router(adjustment_router)
    app.include_router(transfer_router)
    app.include_router(report_router)
    return TestClient(app)


@pytest.fixture()
def create_warehouse(client):
    """POST /warehouses and return the warehouse_id."""

    def _create(code="DAL01", **overrides):
        payload = {
            "name": f"Warehouse {code}",
            "code": code,
            "address": {
                "street": "123 Logistics Way",
                "city": "Dallas",
                "state": "TX",
                "postal_code": "75201",
                "country": "US",
            },
            "created_by": "admin-1",
        }
        payload.update(overrides)
        response = client.post("/warehouses", json=payload)
        assert response.status_code == 201
        return response.json()["warehouse_id"]

    return _create
