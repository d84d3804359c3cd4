"""Warehouse registry — commands and handler."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from warehousing.domain import warehousing
from warehousing.warehouse.warehouse import Warehouse

logger = structlog.get_logger(__name__)


@warehousing.command(part_of="Warehouse")
class CreateWarehouse:
    name = String(required=True, max_length=100)
    code = String(required=True, max_length=10)
    address = Text()  # JSON-encoded address
    phone = String(max_length=30)
    email = String(max_length=254)
    manager_id = Identifier()
    created_by = String(max_length=255)


@warehousing.command(part_of="Warehouse")
class UpdateWarehouse:
    warehouse_id = Identifier(required=True)
    name = String(max_length=100)
    code = String(max_length=10)
    address = Text()  # JSON-encoded address
    phone = String(max_length=30)
    email = String(max_length=254)
    manager_id = Identifier()
    updated_by = String(max_length=255)


@warehousing.command(part_of="Warehouse")
class ActivateWarehouse:
    warehouse_id = Identifier(required=True)
    updated_by = String(max_length=255)


@warehousing.command(part_of="Warehouse")
class DeactivateWarehouse:
    warehouse_id = Identifier(required=True)
    updated_by = String(max_length=255)


@warehousing.command(part_of="Warehouse")
class DeleteWarehouse:
    warehouse_id = Identifier(required=True)
    deleted_by = String(max_length=255)


def _parse_address(raw):
    if not raw:
        return None
    return json.loads(raw) if isinstance(raw, str) else raw


def _ensure_code_is_free(repo, code, warehouse_id=None):
    existing = repo.find_by_code(code)
    if existing is not None and str(existing.id) != str(warehouse_id):
        raise ValidationError({"code": [f"Warehouse code {existing.code} already exists"]})


@warehousing.command_handler(part_of=Warehouse)
class WarehouseManagementHandler:
    @handle(CreateWarehouse)
    def create_warehouse(self, command):
        repo = current_domain.repository_for(Warehouse)
        _ensure_code_is_free(repo, command.code)

        warehouse = Warehouse.create(
            name=command.name,
            code=command.code,
            address=_parse_address(command.address),
            phone=command.phone,
            email=command.email,
            manager_id=command.manager_id,
            created_by=command.created_by,
        )
        repo.add(warehouse)
        logger.info("Warehouse created", warehouse_id=str(warehouse.id), code=warehouse.code)
        return str(warehouse.id)

    @handle(UpdateWarehouse)
    def update_warehouse(self, command):
        repo = current_domain.repository_for(Warehouse)
        warehouse = repo.get(command.warehouse_id)
        if command.code:
            _ensure_code_is_free(repo, command.code, warehouse.id)

        warehouse.update_details(
            updated_by=command.updated_by,
            name=command.name,
            code=command.code,
            address=_parse_address(command.address),
            phone=command.phone,
            email=command.email,
            manager_id=command.manager_id,
        )
        repo.add(warehouse)

    @handle(ActivateWarehouse)
    def activate_warehouse(self, command):
        repo = current_domain.repository_for(Warehouse)
        warehouse = repo.get(command.warehouse_id)
        warehouse.activate(updated_by=command.updated_by)
        repo.add(warehouse)

    @handle(DeactivateWarehouse)
    def deactivate_warehouse(self, command):
        repo = current_domain.repository_for(Warehouse)
        warehouse = repo.get(command.warehouse_id)
        warehouse.deactivate(updated_by=command.updated_by)
        repo.add(warehouse)

    @handle(DeleteWarehouse)
    def delete_warehouse(self, command):
        repo = current_domain.repository_for(Warehouse)
        warehouse = repo.get(command.warehouse_id)
        warehouse.mark_deleted(deleted_by=command.deleted_by)

        repo._dao.delete(warehouse)
        logger.info("Warehouse deleted", warehouse_id=str(warehouse.id), code=warehouse.code)
