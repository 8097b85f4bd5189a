"""
tests/test_store.py
────────────────────
Tests for the SQLite entity store.
"""
from datetime import UTC, datetime, timedelta

import pytest

from config.sites import SEED_SITES
from src.data.models import FaultStatus, Prediction, Site
from src.data.store import RecordNotFoundError, Store, StoreError, UnknownEntityError, to_dataframe


class TestCreate:
    def test_assigns_id_and_created_date(self, store, make_prediction):
        saved = store.create("prediction", make_prediction())
        assert saved.id
        assert saved.created_date is not None
        assert isinstance(saved, Prediction)

    def test_accepts_mapping(self, store):
        saved = store.create("site", {"site_id": "S-9", "name": "Mapped"})
        assert isinstance(saved, Site)

    def test_unknown_entity(self, store):
        with pytest.raises(UnknownEntityError):
            store.create("turbine", {"x": 1})

    def test_list_fields_round_trip(self, store, make_fault):
        saved = store.create("fault", make_fault(observable_symptoms=["a", "b"]))
        assert store.get("fault", saved.id).observable_symptoms == ["a", "b"]

    def test_bool_round_trip(self, store, make_fault):
        saved = store.create("fault", make_fault(detected_by_ai=True))
        assert store.get("fault", saved.id).detected_by_ai is True


class TestQuery:
    @pytest.fixture
    def ticking_store(self):
        start = datetime(2024, 6, 1, tzinfo=UTC)
        ticks = iter(range(1000))
        s = Store(":memory:", now=lambda: start + timedelta(seconds=next(ticks)))
        yield s
        s.close()

    def test_list_newest_first(self, ticking_store, make_prediction):
        ids = [ticking_store.create("prediction", make_prediction()).id for _ in range(3)]
        assert [p.id for p in ticking_store.list("prediction")] == ids[::-1]

    def test_list_ascending_and_limit(self, ticking_store, make_prediction):
        ids = [ticking_store.create("prediction", make_prediction()).id for _ in range(5)]
        assert [p.id for p in ticking_store.list("prediction", "created_date", 2)] == ids[:2]

    def test_ties_keep_insertion_order(self, store, make_prediction, monkeypatch):
        frozen = datetime(2024, 6, 1, tzinfo=UTC)
        monkeypatch.setattr(store, "_now", lambda: frozen)
        ids = [store.create("prediction", make_prediction()).id for _ in range(3)]
        assert [p.id for p in store.list("prediction", "created_date")] == ids

    def test_filter(self, store, make_prediction):
        store.create("prediction", make_prediction(site_id="SITE-A"))
        store.create("prediction", make_prediction(site_id="SITE-B"))
        store.create("prediction", make_prediction(site_id="SITE-B", fault_type="undervoltage"))
        assert len(store.filter("prediction", {"site_id": "SITE-B"})) == 2
        assert len(store.filter("prediction", {"site_id": "SITE-B", "predicted_fault_type": "undervoltage"})) == 1

    def test_filter_enum_value(self, store, make_fault):
        store.create("fault", make_fault(status=FaultStatus.RESOLVED))
        store.create("fault", make_fault())
        assert len(store.filter("fault", {"status": FaultStatus.ACTIVE})) == 1

    def test_unknown_order_column(self, store):
        with pytest.raises(StoreError):
            store.list("prediction", "-nonsense")

    def test_unknown_filter_field(self, store):
        with pytest.raises(StoreError):
            store.filter("prediction", {"nonsense": 1})

    def test_count(self, store, make_fault):
        store.create("fault", make_fault())
        store.create("fault", make_fault(detected_by_ai=False))
        assert store.count("fault") == 2
        assert store.count("fault", {"detected_by_ai": True}) == 1


class TestUpdate:
    def test_partial_update(self, store, make_prediction):
        saved = store.create("prediction", make_prediction())
        updated = store.update("prediction", saved.id, {"was_accurate": True})
        assert updated.was_accurate is True
        assert store.get("prediction", saved.id).was_accurate is True
        assert updated.fault_probability == saved.fault_probability

    def test_missing_record(self, store):
        with pytest.raises(RecordNotFoundError):
            store.update("prediction", "missing", {"was_accurate": True})

    def test_get_missing(self, store):
        assert store.get("prediction", "missing") is None


class TestSeed:
    def test_seed_once(self, store):
        assert store.seed_sites(SEED_SITES) == len(SEED_SITES)
        assert store.seed_sites(SEED_SITES) == 0
        assert store.count("site") == len(SEED_SITES)


class TestDataFrame:
    def test_to_dataframe(self, store, make_prediction):
        store.create("prediction", make_prediction())
        df = to_dataframe(store.list("prediction"))
        assert len(df) == 1
        assert "fault_probability" in df.columns
