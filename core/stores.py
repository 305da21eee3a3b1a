"""Persistence collaborators for medicine, sale and order snapshots.

The core never touches storage; views load a snapshot through a store, run a
core operation, and hand the result back to the same store. ``MemoryStore``
keeps JSON text per record the way the browser build used local storage;
``DjangoStore`` writes through the ORM.
"""
from __future__ import annotations

import json

from django.conf import settings
from django.db import transaction
from django.utils.module_loading import import_string

from apps.inventory import repository as medicine_repository
from apps.inventory.domain import medicine_from_dict, medicine_to_dict
from apps.procurement import repository as order_repository
from apps.procurement.domain import order_from_dict, order_to_dict
from apps.sales import repository as sale_repository
from apps.sales.domain import sale_from_dict, sale_to_dict

from .exceptions import NotFoundError

MEDICINES = "medicines"
SALES = "sales"
ORDERS = "orders"

CODECS = {
    MEDICINES: (medicine_to_dict, medicine_from_dict),
    SALES: (sale_to_dict, sale_from_dict),
    ORDERS: (order_to_dict, order_from_dict),
}

ORDERING = {
    MEDICINES: (lambda m: m.name.lower(), False),
    SALES: (lambda s: s.sale_date, True),
    ORDERS: (lambda o: o.order_date, True),
}

DEFAULT_STORE = "core.stores.DjangoStore"


class BaseStore:
    def load(self, collection: str) -> list:
        raise NotImplementedError

    def save(self, collection: str, record) -> None:
        raise NotImplementedError

    def delete(self, collection: str, record_id: str) -> None:
        raise NotImplementedError

    def delete_all(self, collection: str) -> None:
        raise NotImplementedError

    def save_all(self, collection: str, records) -> None:
        """Make ``records`` the whole collection."""
        records = list(records)
        keep = {r.id for r in records}
        for existing in self.load(collection):
            if existing.id not in keep:
                self.delete(collection, existing.id)
        for record in records:
            self.save(collection, record)

    def get(self, collection: str, record_id: str):
        for record in self.load(collection):
            if record.id == record_id:
                return record
        raise NotFoundError(f"{collection[:-1].capitalize()} {record_id} not found.")

    @staticmethod
    def check_collection(collection: str) -> None:
        if collection not in CODECS:
            raise ValueError(f"Unknown collection {collection!r}")


class MemoryStore(BaseStore):
    def __init__(self):
        self._data = {name: {} for name in CODECS}

    def load(self, collection):
        self.check_collection(collection)
        _, decode = CODECS[collection]
        records = [decode(json.loads(text)) for text in self._data[collection].values()]
        key, reverse = ORDERING[collection]
        return sorted(records, key=key, reverse=reverse)

    def save(self, collection, record):
        self.check_collection(collection)
        encode, _ = CODECS[collection]
        self._data[collection][record.id] = json.dumps(encode(record))

    def delete(self, collection, record_id):
        self.check_collection(collection)
        self._data[collection].pop(record_id, None)

    def delete_all(self, collection):
        self.check_collection(collection)
        self._data[collection].clear()


class DjangoStore(BaseStore):
    repositories = {
        MEDICINES: (
            medicine_repository.load_medicines,
            medicine_repository.save_medicine,
            medicine_repository.delete_medicine,
            medicine_repository.delete_all,
        ),
        SALES: (
            sale_repository.load_sales,
            sale_repository.save_sale,
            sale_repository.delete_sale,
            sale_repository.delete_all,
        ),
        ORDERS: (
            order_repository.load_orders,
            order_repository.save_order,
            order_repository.delete_order,
            order_repository.delete_all,
        ),
    }

    def load(self, collection):
        self.check_collection(collection)
        return self.repositories[collection][0]()

    def save(self, collection, record):
        self.check_collection(collection)
        self.repositories[collection][1](record)

    def delete(self, collection, record_id):
        self.check_collection(collection)
        self.repositories[collection][2](record_id)

    def delete_all(self, collection):
        self.check_collection(collection)
        self.repositories[collection][3]()

    @transaction.atomic
    def save_all(self, collection, records):
        super().save_all(collection, records)


_stores: dict[str, BaseStore] = {}


def get_store() -> BaseStore:
    path = getattr(settings, "PHARMACY_STORE", DEFAULT_STORE)
    if path not in _stores:
        _stores[path] = import_string(path)()
    return _stores[path]


def save_changed(store: BaseStore, collection: str, before, after) -> list:
    """Persist only the records of ``after`` that differ from ``before``."""
    previous = {r.id: r for r in before}
    changed = [r for r in after if previous.get(r.id) != r]
    for record in changed:
        store.save(collection, record)
    return changed
