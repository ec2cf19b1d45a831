"""
Tests for durable booking draft persistence.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from salon_booking.domain.entities.booking import Customer
from salon_booking.domain.entities.booking_draft import BookingDraft, WizardStep
from salon_booking.infrastructure.store.json_store import JsonDraftStore
from salon_booking.infrastructure.store.memory_store import MemoryDraftStore


def test_json_store_persistence():
    """A saved draft survives a fresh store instance on the same directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonDraftStore(data_dir=tmpdir)
        draft_id = store.new_id()

        store.save_draft(
            BookingDraft(
                id=draft_id,
                step=WizardStep.details,
                service_id="comb_twist",
                stylist_id="stylist_b",
                date_iso="2025-10-14",
                time="12:00",
                customer=Customer(first_name="Ada", last_name="Lovelace", email="ada@example.com"),
                updated_at=1760000000.0,
            )
        )

        retrieved = JsonDraftStore(data_dir=tmpdir).get_draft(draft_id)

        assert retrieved.step == WizardStep.details
        assert retrieved.service_id == "comb_twist"
        assert retrieved.stylist_id == "stylist_b"
        assert (retrieved.date_iso, retrieved.time) == ("2025-10-14", "12:00")
        assert retrieved.customer.last_name == "Lovelace"
        assert retrieved.updated_at == 1760000000.0


def test_missing_and_corrupted_drafts_read_as_none():
    """Unknown ids, unsafe ids and unreadable files all look like a missing draft."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonDraftStore(data_dir=tmpdir)
        Path(tmpdir, "broken.json").write_text("{not json", encoding="utf-8")

        assert store.get_draft("nothing-here") is None
        assert store.get_draft("../etc/passwd") is None
        assert store.get_draft("broken") is None


def test_unknown_step_falls_back_to_service():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonDraftStore(data_dir=tmpdir)
        Path(tmpdir, "old.json").write_text('{"step": "payment", "service_id": "cornrows"}', encoding="utf-8")

        draft = store.get_draft("old")

        assert draft.step == WizardStep.service
        assert draft.service_id == "cornrows"
        assert draft.stylist_id == "auto"


def test_delete_and_unsafe_save():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonDraftStore(data_dir=tmpdir)
        store.save_draft(BookingDraft(id="d1"))
        store.delete_draft("d1")
        assert store.get_draft("d1") is None

        with pytest.raises(ValueError):
            store.save_draft(BookingDraft(id="../escape"))


def test_memory_store_evicts_oldest_drafts():
    store = MemoryDraftStore(max_drafts=2)
    for draft_id in ("a", "b", "c"):
        store.save_draft(BookingDraft(id=draft_id))

    assert store.get_draft("a") is None
    assert store.get_draft("c") is not None
