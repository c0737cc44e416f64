"""
Pytest configuration and fixtures for RecordGrid tests.
"""
import os
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

# Widget tests run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from recordgrid.config.i18n import I18n
from recordgrid.core.metadata import (
    FieldKind, FieldMetadata, StaticMetadataProvider, TypeMetadata,
)
from recordgrid.core.records import (
    AmountValue, ChoiceValue, Record, RecordCollection, RecordReference,
)
from recordgrid.core.sink import MemoryGridSink

# Qt Application fixture for tests that need QWidget
_qt_app = None


@pytest.fixture(scope="session")
def qapp():
    """Create a QApplication for tests that need Qt widgets."""
    global _qt_app
    from PySide6.QtWidgets import QApplication
    if _qt_app is None:
        _qt_app = QApplication.instance() or QApplication([])
    yield _qt_app


@pytest.fixture(autouse=True)
def english():
    """Run every test with English translations."""
    i18n = I18n.get_instance()
    previous = i18n.get_current_language()
    i18n.set_language("en")
    yield
    i18n.set_language(previous)


def make_contact(**attributes) -> Record:
    """Contact record with a fresh id."""
    return Record("contact", uuid.uuid4(), attributes)


@pytest.fixture
def contacts():
    """Three contacts: two with an email, one without."""
    return [
        make_contact(fullname="Ann Smith", email="ann@acme.com"),
        make_contact(fullname="Bob Jones", email="bob@example.org"),
        make_contact(fullname="Cid Moore"),
    ]


@pytest.fixture
def email_contacts():
    """Three contacts that only carry an email (third one missing)."""
    return [
        make_contact(email="ann@acme.com"),
        make_contact(email="bob@example.org"),
        make_contact(),
    ]


@pytest.fixture
def rich_contacts():
    """Contacts with composite and typed values."""
    account = RecordReference("account", uuid.uuid4(), "Acme Corp")
    return [
        make_contact(
            contactid=uuid.uuid4(),
            fullname="Ann Smith",
            age=34,
            creditlimit=AmountValue(Decimal("1500.5"), "EUR"),
            statuscode=ChoiceValue(1),
            parentcustomerid=account,
            donotemail=True,
            createdon=datetime(2024, 3, 1, 8, 30, 0, tzinfo=timezone.utc),
        ),
        make_contact(
            contactid=uuid.uuid4(),
            fullname="Bob Jones",
            age=41,
            statuscode=ChoiceValue(2, "Inactive"),
            donotemail=False,
            createdon=datetime(2024, 3, 2, 9, 15, 0, 250000, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def metadata():
    """Static metadata for the contact and account types."""
    provider = StaticMetadataProvider()
    provider.add_type(TypeMetadata("contact", "Contact", "contactid", "fullname"))
    provider.add_type(TypeMetadata("account", "Account", "accountid", "name"))
    fields = [
        FieldMetadata("contactid", "contact", "Contact", FieldKind.UNIQUEIDENTIFIER,
                      is_primary_id=True),
        FieldMetadata("fullname", "contact", "Full Name"),
        FieldMetadata("email", "contact", "Email"),
        FieldMetadata("age", "contact", "Age", FieldKind.INTEGER),
        FieldMetadata("creditlimit", "contact", "Credit Limit", FieldKind.MONEY),
        FieldMetadata("statuscode", "contact", "Status", FieldKind.CHOICE,
                      options={1: "Active", 2: "Inactive"}),
        FieldMetadata("parentcustomerid", "contact", "Company", FieldKind.LOOKUP),
        FieldMetadata("donotemail", "contact", "Do Not Email", FieldKind.BOOLEAN),
        FieldMetadata("createdon", "contact", "Created On", FieldKind.DATETIME),
        FieldMetadata("accountid", "account", "Account", FieldKind.UNIQUEIDENTIFIER,
                      is_primary_id=True),
        FieldMetadata("name", "account", "Account Name"),
    ]
    for field_meta in fields:
        provider.add_field(field_meta)
    return provider


@pytest.fixture
def sink():
    """Headless grid sink."""
    return MemoryGridSink()


@pytest.fixture
def collection(contacts):
    return RecordCollection("contact", contacts)
