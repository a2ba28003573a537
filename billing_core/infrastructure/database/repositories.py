"""Data access layer for billing documents"""

from typing import Any, Dict, List
from sqlalchemy.orm import Session
from billing_core.infrastructure.database.models import Document
from billing_core.domain.exceptions import RecordNotFoundError
from billing_core.domain.models import Expense, MonetaryRecord, RecordKind, SalaryPayment
from billing_core.domain.serialization import (
    expense_from_document,
    expense_to_document,
    record_from_document,
    record_to_document,
    salary_from_document,
    salary_to_document,
)

JOB_ORDERS = "job_orders"
INVOICES = "invoices"
EXPENSES = "expenses"
SALARIES = "salaries"

RECORD_COLLECTIONS = {
    RecordKind.JOB_ORDER: JOB_ORDERS,
    RecordKind.INVOICE: INVOICES,
}


class DocumentRepository:
    """
    Per-user document collections: list / get / create / update / delete.

    Updates merge the partial document over the stored one; concurrent
    writers are resolved last-write-wins.
    """

    def __init__(self, db: Session, owner_id: str):
        self.db = db
        self.owner_id = owner_id

    def _query(self, collection: str):
        return self.db.query(Document).filter(
            Document.owner_id == self.owner_id,
            Document.collection == collection,
        )

    def _get_row(self, collection: str, document_id: str) -> Document:
        row = self._query(collection).filter(Document.id == document_id).first()
        if row is None:
            raise RecordNotFoundError(f"No document {document_id} in {collection}")
        return row

    def list(self, collection: str) -> List[Dict[str, Any]]:
        """All documents in a collection, oldest first"""
        rows = self._query(collection).order_by(Document.created_at, Document.id).all()
        return [dict(row.payload) for row in rows]

    def get(self, collection: str, document_id: str) -> Dict[str, Any]:
        return dict(self._get_row(collection, document_id).payload)

    def create(self, collection: str, document: Dict[str, Any]) -> str:
        """Store a new document; its 'id' key becomes the row id"""
        row = Document(
            id=document["id"],
            owner_id=self.owner_id,
            collection=collection,
            payload=dict(document),
        )
        self.db.add(row)
        self.db.flush()  # Get ID without committing
        return row.id

    def update(self, collection: str, document_id: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        row = self._get_row(collection, document_id)
        # Assign a new dict so the JSON column registers the change
        row.payload = {**row.payload, **partial, "id": document_id}
        self.db.flush()
        return dict(row.payload)

    def delete(self, collection: str, document_id: str) -> None:
        row = self._get_row(collection, document_id)
        self.db.delete(row)
        self.db.flush()


class BillingRepository:
    """Typed access to records, expenses and salary payments for one user"""

    def __init__(self, db: Session, owner_id: str):
        self.documents = DocumentRepository(db, owner_id)

    # Job orders and invoices

    def list_records(self, kind: RecordKind) -> List[MonetaryRecord]:
        kind = RecordKind(kind)
        return [record_from_document(doc, kind) for doc in self.documents.list(RECORD_COLLECTIONS[kind])]

    def get_record(self, kind: RecordKind, record_id: str) -> MonetaryRecord:
        kind = RecordKind(kind)
        return record_from_document(self.documents.get(RECORD_COLLECTIONS[kind], record_id), kind)

    def record_numbers(self, kind: RecordKind) -> List[str]:
        return [record.number for record in self.list_records(kind)]

    def create_record(self, record: MonetaryRecord) -> str:
        return self.documents.create(RECORD_COLLECTIONS[RecordKind(record.kind)], record_to_document(record))

    def update_record(self, record: MonetaryRecord) -> None:
        self.documents.update(RECORD_COLLECTIONS[RecordKind(record.kind)], record.id, record_to_document(record))

    def delete_record(self, kind: RecordKind, record_id: str) -> None:
        self.documents.delete(RECORD_COLLECTIONS[RecordKind(kind)], record_id)

    # Expenses

    def list_expenses(self) -> List[Expense]:
        return [expense_from_document(doc) for doc in self.documents.list(EXPENSES)]

    def get_expense(self, expense_id: str) -> Expense:
        return expense_from_document(self.documents.get(EXPENSES, expense_id))

    def create_expense(self, expense: Expense) -> str:
        return self.documents.create(EXPENSES, expense_to_document(expense))

    def update_expense(self, expense: Expense) -> None:
        self.documents.update(EXPENSES, expense.id, expense_to_document(expense))

    def delete_expense(self, expense_id: str) -> None:
        self.documents.delete(EXPENSES, expense_id)

    # Salary payments

    def list_salaries(self) -> List[SalaryPayment]:
        return [salary_from_document(doc) for doc in self.documents.list(SALARIES)]

    def create_salary(self, payment: SalaryPayment) -> str:
        return self.documents.create(SALARIES, salary_to_document(payment))
