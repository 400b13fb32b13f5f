import pytest

from sxew_app.models.schemas import ParameterSet
from sxew_app.services.process_model import evaluate
from sxew_app.services.storage import SessionStore


@pytest.fixture
def store():
    return SessionStore()


def _store(store, session_id, revision, production):
    params = ParameterSet(annual_production=production)
    return store.store_result(session_id, revision, params, evaluate(params), {}, [])


class TestSessions:

    def test_new_session_holds_defaults(self, store):
        session = store.create_session()
        assert session["revision"] == 0
        assert session["inputs"] == ParameterSet()
        assert session["results"] == evaluate(ParameterSet())
        assert session["analysis"] is None

    def test_get_missing_session(self, store):
        assert store.get_session("missing") is None

    def test_get_or_create_with_client_id(self, store):
        session = store.get_or_create_session("tab-1")
        assert session["id"] == "tab-1"
        assert store.get_session("tab-1") is not None

    def test_get_or_create_without_id(self, store):
        session = store.get_or_create_session(None)
        assert store.get_session(session["id"]) is not None

    def test_delete(self, store):
        session = store.create_session()
        assert store.delete_session(session["id"]) is True
        assert store.delete_session(session["id"]) is False

    def test_reset_restores_defaults(self, store):
        session = store.create_session()
        revision = store.next_revision()
        _store(store, session["id"], revision, 50000)
        reset = store.reset_session(session["id"])
        assert reset["inputs"] == ParameterSet()
        assert reset["revision"] > revision


class TestLastWriteWins:

    def test_revisions_increase(self, store):
        first = store.next_revision()
        assert store.next_revision() > first

    def test_newer_result_replaces_older(self, store):
        session = store.create_session()
        r1 = store.next_revision()
        r2 = store.next_revision()
        assert _store(store, session["id"], r1, 11000) is True
        assert _store(store, session["id"], r2, 12000) is True
        assert store.get_session(session["id"])["inputs"].annual_production == 12000

    def test_stale_result_is_discarded(self, store):
        session = store.create_session()
        r1 = store.next_revision()
        r2 = store.next_revision()
        assert _store(store, session["id"], r2, 12000) is True
        assert _store(store, session["id"], r1, 11000) is False
        stored = store.get_session(session["id"])
        assert stored["revision"] == r2
        assert stored["inputs"].annual_production == 12000

    def test_store_clears_analysis(self, store):
        session = store.create_session()
        r1 = store.next_revision()
        _store(store, session["id"], r1, 11000)
        assert store.store_analysis(session["id"], r1, {"text": "ok"}) is True
        _store(store, session["id"], store.next_revision(), 12000)
        assert store.get_session(session["id"])["analysis"] is None

    def test_analysis_for_old_revision_is_dropped(self, store):
        session = store.create_session()
        r1 = store.next_revision()
        _store(store, session["id"], r1, 11000)
        _store(store, session["id"], store.next_revision(), 12000)
        assert store.store_analysis(session["id"], r1, {"text": "stale"}) is False
