# stores.py - single-row configuration tables served from memory
import copy
import logging
import threading
import time
from flask import current_app
from extensions import db


logger = logging.getLogger(__name__)


class SettingsValidationError(Exception):
    """Raised with every field error collected, not just the first."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class SingletonStore:
    """
    Serves a single-row configuration table from memory.

    The row is created with model defaults when absent. Snapshots older than
    SETTINGS_MAX_AGE seconds are re-read so that several worker processes
    converge on the latest saved values.

    ``validator(data, current_snapshot)`` returns the column changes to apply
    or raises SettingsValidationError.
    """

    def __init__(self, model, validator, serializer=None, defaults=None):
        self.model = model
        self.validator = validator
        self.serializer = serializer or (lambda row: row.to_dict())
        self.defaults = defaults
        self._snapshot = None
        self._loaded_at = 0.0
        self._lock = threading.Lock()

    def _row(self):
        row = self.model.query.order_by(self.model.id).first()
        if row is None:
            row = self.model()
            db.session.add(row)
            db.session.commit()
            logger.info(f"Created default {self.model.__tablename__} row")
        return row

    def _apply(self, row, changes):
        try:
            for attr, value in changes.items():
                setattr(row, attr, value)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        self._snapshot = self.serializer(row)
        self._loaded_at = time.monotonic()
        return copy.deepcopy(self._snapshot)

    def reload(self):
        with self._lock:
            self._snapshot = self.serializer(self._row())
            self._loaded_at = time.monotonic()
            return copy.deepcopy(self._snapshot)

    def get(self):
        max_age = current_app.config.get("SETTINGS_MAX_AGE", 60)
        if self._snapshot is None or time.monotonic() - self._loaded_at >= max_age:
            return self.reload()
        return copy.deepcopy(self._snapshot)

    def update(self, data):
        """Validate, persist, then refresh the snapshot. Returns the new snapshot."""
        with self._lock:
            row = self._row()
            return self._apply(row, self.validator(data, self.serializer(row)))

    def reset(self):
        """Restore the row to its default values."""
        with self._lock:
            return self._apply(self._row(), self.defaults() if self.defaults else {})


def register_store(app, name, store):
    app.extensions.setdefault("singleton_stores", {})[name] = store
    return store


def get_store(name):
    return current_app.extensions["singleton_stores"][name]
