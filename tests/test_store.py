"""
Tests for SQLite pack slip persistence.
"""

import sqlite3

import pytest

from packslip.extraction import ExtractionMethod, ExtractionResult
from packslip.output_handler import PackSlipStore
from packslip.parser import LineItem
from packslip.pipeline import PackSlipRecord, PackSlipStatus
from packslip.utils.exceptions import DatabaseError, RecordNotFoundError
from packslip.vendors import VendorDetection


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "packslips.db"


@pytest.fixture
def store(db_path):
    with PackSlipStore(db_path) as store:
        yield store


def make_record(**overrides):
    fields = dict(file_name="slip.pdf", mime_type="application/pdf", file_size=2048)
    fields.update(overrides)
    return PackSlipRecord(**fields)


def test_create_persists_to_db(store, db_path):
    """Creating a record writes a row to SQLite"""
    record = store.create(make_record())

    conn = sqlite3.connect(db_path)
    row = conn.execute("SELECT id, status, file_name FROM pack_slips WHERE id = ?", (record.id,)).fetchone()
    conn.close()

    assert row == (record.id, "uploaded", "slip.pdf")


def test_get_round_trips_nested_fields(store):
    record = make_record(
        status=PackSlipStatus.REVIEW,
        extraction=ExtractionResult("10 pc GALV CAP", ExtractionMethod.PDF_TEXT, 1),
        vendor=VendorDetection.from_auto("stephens-pipe-steel"),
        line_items=[LineItem(description="GALV CAP", quantity=10, unit="pc")],
        metadata={"po_number": "4471"},
    )
    store.create(record)

    loaded = store.get(record.id)

    assert loaded.status is PackSlipStatus.REVIEW
    assert loaded.extraction == record.extraction
    assert loaded.vendor == record.vendor
    assert loaded.line_items == record.line_items
    assert loaded.metadata == {"po_number": "4471"}


def test_get_unknown_record(store):
    with pytest.raises(RecordNotFoundError):
        store.get("missing")


def test_duplicate_create_rejected(store):
    record = store.create(make_record())

    with pytest.raises(DatabaseError):
        store.create(record)


def test_save_updates_existing_record(store):
    record = store.create(make_record())
    record.status = PackSlipStatus.EXTRACTED
    record.errors.append("something odd")

    store.save(record)

    loaded = store.get(record.id)
    assert loaded.status is PackSlipStatus.EXTRACTED
    assert loaded.errors == ["something odd"]


def test_save_unknown_record(store):
    with pytest.raises(RecordNotFoundError):
        store.save(make_record())


def test_update_partial_fields(store):
    record = store.create(make_record())

    updated = store.update(record.id, status="review", metadata={"job": "J-12"})

    assert updated.status is PackSlipStatus.REVIEW
    assert store.get(record.id).metadata == {"job": "J-12"}


def test_update_rejects_unknown_fields(store):
    record = store.create(make_record())

    with pytest.raises(ValueError):
        store.update(record.id, id="new-id")


def test_list_and_count_by_status(store):
    first = store.create(make_record(file_name="a.pdf"))
    store.create(make_record(file_name="b.pdf"))
    store.update(first.id, status=PackSlipStatus.SUBMITTED)

    assert store.count() == 2
    assert store.count(PackSlipStatus.SUBMITTED) == 1
    assert [r.file_name for r in store.list(status=PackSlipStatus.UPLOADED)] == ["b.pdf"]
    assert len(store.list(limit=1)) == 1


def test_records_survive_reopening(db_path):
    with PackSlipStore(db_path) as store:
        record = store.create(make_record())

    with PackSlipStore(db_path) as reopened:
        assert reopened.get(record.id).file_name == "slip.pdf"


def test_in_memory_store():
    with PackSlipStore(":memory:") as store:
        record = store.create(make_record())
        assert store.get(record.id).id == record.id
