from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from ledger.core.database import Base
from ledger.models.company import Company
from ledger.models.hotel import Hotel
from ledger.models.payment import Payment
from ledger.models.purchase import Purchase
from ledger.models.sale import Sale
from ledger.models.supplier import Supplier


ENTITY_MODELS: dict[str, type[Base]] = {
    "companies": Company,
    "suppliers": Supplier,
    "hotels": Hotel,
    "sales": Sale,
    "purchases": Purchase,
    "payments": Payment,
}

# column used for natural-key lookups when none is given
DEFAULT_NATURAL_KEYS: dict[str, str] = {
    "companies": "code",
    "suppliers": "code",
    "hotels": "code",
}


class UnknownEntityTypeError(ValueError):
    pass


class LedgerStore:
    """Narrow persistence surface used by the import commit step."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _model(self, entity_type: str) -> type[Base]:
        model = ENTITY_MODELS.get(entity_type)
        if model is None:
            raise UnknownEntityTypeError(f"Unknown entity type: {entity_type}")
        return model

    def find_by_natural_key(self, entity_type: str, key: Any, field: str | None = None) -> Any | None:
        model = self._model(entity_type)
        column_name = field or DEFAULT_NATURAL_KEYS.get(entity_type)
        if column_name is None:
            raise UnknownEntityTypeError(f"{entity_type} has no natural key")
        column = getattr(model, column_name)
        return self.db.query(model).filter(column == key).first()

    def code_exists(self, entity_type: str, code: str) -> bool:
        return self.find_by_natural_key(entity_type, code, field="code") is not None

    def create(self, entity_type: str, fields: dict[str, Any]) -> Any:
        model = self._model(entity_type)
        entity = model(**fields)
        self.db.add(entity)
        self.db.flush()
        return entity

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
