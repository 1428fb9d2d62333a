"""
SQL-backed vehicle registry used by identity resolution.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from ..fusion.types import RegistryVehicle
from ..models.vehicle import Vehicle


def to_registry_vehicle(row: Vehicle) -> RegistryVehicle:
    return RegistryVehicle(
        plate=row.plate,
        vin=row.vin,
        make=row.make,
        model=row.model,
        colour=row.colour,
        has_gotid=row.has_gotid,
        public_key=row.public_key,
        status=row.status,
        meta={"id": row.id, "gotid_uuid": row.gotid_uuid},
    )


class SqlRegistry:
    """``RegistryLookup`` over the ``vehicles`` table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_plate(self, plate: str) -> Optional[RegistryVehicle]:
        if not plate:
            return None
        row = self.db.query(Vehicle).filter(Vehicle.plate == plate).first()
        return to_registry_vehicle(row) if row else None

    def find_by_public_key(self, public_key: str) -> Optional[RegistryVehicle]:
        if not public_key:
            return None
        row = self.db.query(Vehicle).filter(Vehicle.public_key == public_key).first()
        return to_registry_vehicle(row) if row else None
