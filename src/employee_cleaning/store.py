# ========================
# src/employee_cleaning/store.py
# ========================

"""
Employee Store Module

An explicit, in-memory employee table with the handful of operations the
cleaning steps need: bulk read, filtered update, filtered delete and
insert-with-generated-id for departments.
"""

import copy
import csv
import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .errors import ConstraintViolation, StoreUnavailable
from .ingestion import EmployeeCSVReader

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Predicate = Callable[[Record], bool]


class EmployeeTable:
    """
    Mutable collection of employee records plus the derived departments table.

    Records are kept in insertion order. Every operation fails with
    StoreUnavailable once the table has been closed.
    """

    def __init__(self, records: Optional[Iterable[Record]] = None):
        self._records: List[Record] = [dict(r) for r in (records or [])]
        self.departments: List[Dict[str, Any]] = []
        self._next_department_id = 1
        self._salary_bounds: Optional[tuple] = None
        self._closed = False
        logger.debug(f"EmployeeTable created with {len(self._records)} records")

    @classmethod
    def from_records(cls, records: Iterable[Record]) -> 'EmployeeTable':
        return cls(records)

    @classmethod
    def from_csv(cls, file_path: str, chunk_size: int = 1000) -> 'EmployeeTable':
        """
        Load a raw employee export.

        Raises:
            StoreUnavailable: If the file cannot be opened or read.
        """
        reader = EmployeeCSVReader(file_path)
        try:
            records = reader.read_all(chunk_size)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise StoreUnavailable(f"Cannot read employee data from {file_path}: {e}") from e
        logger.info(f"Loaded {len(records)} employee records from {file_path}")
        return cls(records)

    def __len__(self) -> int:
        self._ensure_open()
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        self._ensure_open()
        return iter(list(self._records))

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreUnavailable("Employee table is closed")

    def close(self) -> None:
        self._closed = True
        logger.debug("EmployeeTable closed")

    # Core operations

    def read_all(self) -> List[Record]:
        """Return the live list of employee records."""
        self._ensure_open()
        return self._records

    def update_where(self, predicate: Predicate,
                     updater: Callable[[Record], Record]) -> int:
        """
        Apply updater to every record matching predicate.

        The updater returns the new values for the fields it changes. A record
        counts as updated only if one of those values actually differs.

        Returns:
            int: Number of records changed
        """
        self._ensure_open()
        pending = []
        for index, record in enumerate(self._records):
            if not predicate(record):
                continue
            changes = updater(record)
            if any(record.get(k, _MISSING) != v for k, v in changes.items()):
                self._check_salary(record.get('employee_id'), changes.get('salary', record.get('salary')))
                pending.append((index, changes))

        for index, changes in pending:
            self._records[index].update(changes)
        return len(pending)

    def delete_where(self, predicate: Predicate) -> int:
        """Hard-delete every record matching predicate. Returns rows removed."""
        self._ensure_open()
        kept = [r for r in self._records if not predicate(r)]
        removed = len(self._records) - len(kept)
        self._records[:] = kept
        return removed

    def delete_indices(self, indices: Iterable[int]) -> int:
        """Hard-delete records by their current position."""
        self._ensure_open()
        doomed = set(indices)
        kept = [r for i, r in enumerate(self._records) if i not in doomed]
        removed = len(self._records) - len(kept)
        self._records[:] = kept
        return removed

    def insert(self, record: Record) -> None:
        self._ensure_open()
        self._check_salary(record.get('employee_id'), record.get('salary'))
        self._records.append(dict(record))

    def insert_department(self, name: str) -> int:
        """
        Insert a department and return its generated id.

        Names are unique; inserting an existing name returns its current id.
        """
        self._ensure_open()
        existing = self.department_id_for(name)
        if existing is not None:
            return existing

        department_id = self._next_department_id
        self._next_department_id += 1
        self.departments.append({'department_id': department_id, 'department_name': name})
        logger.debug(f"Inserted department {department_id}: {name}")
        return department_id

    def department_id_for(self, name: str) -> Optional[int]:
        for department in self.departments:
            if department['department_name'] == name:
                return department['department_id']
        return None

    def department_name_for(self, department_id: Optional[int]) -> Optional[str]:
        for department in self.departments:
            if department['department_id'] == department_id:
                return department['department_name']
        return None

    def department_ids(self) -> set:
        return {d['department_id'] for d in self.departments}

    def drop_column(self, name: str) -> int:
        """Remove a field from every record. Returns records that had it."""
        self._ensure_open()
        dropped = 0
        for record in self._records:
            if name in record:
                del record[name]
                dropped += 1
        return dropped

    def columns(self) -> List[str]:
        self._ensure_open()
        seen: Dict[str, None] = {}
        for record in self._records:
            for key in record:
                seen.setdefault(key, None)
        return list(seen)

    # Constraints and transactions

    def add_salary_constraint(self, floor=0, cap=1000000) -> None:
        """
        Enforce floor <= salary <= cap on the current rows and every later write.

        Raises:
            ConstraintViolation: If existing rows already break the bound.
        """
        self._ensure_open()
        floor, cap = Decimal(floor), Decimal(cap)
        offenders = [
            r.get('employee_id') for r in self._records
            if r.get('salary') is not None and not floor <= r['salary'] <= cap
        ]
        if offenders:
            raise ConstraintViolation('chk_salary', offenders)
        self._salary_bounds = (floor, cap)
        logger.info(f"Salary check constraint enabled: {floor} <= salary <= {cap}")

    @property
    def has_salary_constraint(self) -> bool:
        return self._salary_bounds is not None

    def _check_salary(self, employee_id, salary) -> None:
        if self._salary_bounds is None or salary is None:
            return
        floor, cap = self._salary_bounds
        if not floor <= salary <= cap:
            raise ConstraintViolation('chk_salary', [employee_id])

    @contextmanager
    def transaction(self):
        """
        All-or-nothing boundary: if the block raises, records and departments
        are restored to their state on entry and the error is re-raised.
        """
        self._ensure_open()
        snapshot = (
            copy.deepcopy(self._records),
            copy.deepcopy(self.departments),
            self._next_department_id,
            self._salary_bounds,
        )
        try:
            yield self
        except Exception:
            logger.warning("Rolling back employee table to its state before the transaction")
            (self._records, self.departments,
             self._next_department_id, self._salary_bounds) = snapshot
            raise


_MISSING = object()
