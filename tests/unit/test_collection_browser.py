"""Tests for the collection browse state machine."""

from __future__ import annotations

import json

import pytest

from vimongo.browse import DEFAULT_LIMIT, CollectionBrowser, CollectionState, infer_field_names
from vimongo.editing.pipeline import DocumentEditPipeline
from vimongo.exceptions import BackendError, QueryParseError


@pytest.fixture
def dao(fake_dao):
    fake_dao.seed("shop", "orders", [{"_id": i, "n": i, "status": "new" if i % 2 else "paid"} for i in range(120)])
    fake_dao.seed("shop", "users", [{"_id": 1, "name": "Ada", "address": {"city": "London", "zip": "N1"}}])
    return fake_dao


@pytest.fixture
def browser(dao) -> CollectionBrowser:
    browser = CollectionBrowser(dao)
    browser.open("shop", "orders")
    return browser


class TestPaging:
    def test_opens_on_first_page(self, browser: CollectionBrowser):
        assert browser.state.page == 0
        assert browser.state.limit == DEFAULT_LIMIT
        assert browser.state.count == 120
        assert [d["n"] for d in browser.documents[:3]] == [0, 1, 2]

    def test_next_page_stops_at_last_page(self, browser: CollectionBrowser):
        assert browser.next_page() is True
        assert browser.state.page == 50
        assert browser.next_page() is True
        assert browser.state.page == 100
        assert len(browser.documents) == 20

        assert browser.next_page() is False
        assert browser.state.page == 100

    def test_prev_page_stops_at_zero(self, browser: CollectionBrowser, dao):
        calls = len(dao.list_calls)
        assert browser.prev_page() is False
        assert browser.state.page == 0
        assert len(dao.list_calls) == calls

    def test_prev_page_after_next(self, browser: CollectionBrowser):
        browser.next_page()
        browser.next_page()
        assert browser.prev_page() is True
        assert browser.state.page == 50

    def test_page_stays_aligned_to_limit(self, browser: CollectionBrowser):
        for _ in range(5):
            browser.next_page()
            assert browser.state.page % browser.state.limit == 0
            assert 0 <= browser.state.page < max(browser.state.count, 1)

    def test_set_limit_realigns_page(self, browser: CollectionBrowser):
        browser.next_page()
        browser.next_page()
        browser.set_limit(30)
        assert browser.state.page == 90

    def test_set_limit_rejects_zero(self, browser: CollectionBrowser):
        with pytest.raises(ValueError):
            browser.set_limit(0)

    def test_page_past_end_is_clamped(self, browser: CollectionBrowser, dao):
        browser.next_page()
        browser.next_page()
        # Documents disappear behind our back
        dao.seed("shop", "orders", [{"_id": i, "n": i} for i in range(60)])

        browser.refresh()

        assert browser.state.count == 60
        assert browser.state.page == 50
        assert len(browser.documents) == 10

    def test_empty_collection(self, dao):
        dao.seed("shop", "empty", [])
        browser = CollectionBrowser(dao)
        browser.open("shop", "empty")
        assert browser.documents == []
        assert browser.next_page() is False
        assert browser.state.page == 0


@pytest.mark.parametrize(
    ("count", "limit"),
    [(0, 50), (1, 50), (50, 50), (100, 50), (120, 50), (5, 1), (7, 3)],
)
def test_paging_walk_stays_in_bounds(fake_dao, count, limit):
    fake_dao.seed("shop", "items", [{"_id": i} for i in range(count)])
    browser = CollectionBrowser(fake_dao)
    browser.open("shop", "items")
    browser.set_limit(limit)
    browser.refresh()

    seen = [browser.state.page]
    while browser.next_page():
        assert 0 <= browser.state.page < count
        seen.append(browser.state.page)
    assert browser.state.page == seen[-1]
    assert len(seen) == max(1, -(-count // limit))

    while browser.prev_page():
        assert browser.state.page >= 0
    assert browser.state.page == 0
    assert browser.prev_page() is False


class TestFilterAndSort:
    def test_filter_resets_page(self, browser: CollectionBrowser):
        browser.next_page()

        browser.apply_filter_text("{ status: 'new' }")

        assert browser.state.page == 0
        assert browser.state.filter == {"status": "new"}
        assert browser.state.count == 60

    def test_sort_is_passed_to_dao(self, browser: CollectionBrowser, dao):
        browser.apply_sort_text("{ n: -1 }")
        assert dao.list_calls[-1]["sort"] == {"n": -1}
        assert browser.state.page == 0

    def test_parse_error_leaves_state_untouched(self, browser: CollectionBrowser, dao):
        browser.apply_filter_text("{ status: 'new' }")
        browser.next_page()
        before = CollectionState(**vars(browser.state))
        calls = len(dao.list_calls)

        with pytest.raises(QueryParseError):
            browser.apply_filter_text("{ status: pending }")

        assert browser.state == before
        assert len(dao.list_calls) == calls

    def test_empty_text_clears_filter(self, browser: CollectionBrowser):
        browser.apply_filter_text("{ status: 'new' }")
        browser.apply_filter_text("")
        assert browser.state.filter == {}
        assert browser.state.count == 120

    def test_reopening_same_collection_keeps_filter(self, browser: CollectionBrowser):
        browser.apply_filter_text("{ status: 'paid' }")
        browser.open("shop", "orders")
        assert browser.state.filter == {"status": "paid"}

    def test_opening_other_collection_resets_filter_and_sort(self, browser: CollectionBrowser):
        browser.apply_filter_text("{ status: 'paid' }")
        browser.apply_sort_text("{ n: 1 }")
        browser.open("shop", "users")
        assert browser.state.filter == {}
        assert browser.state.sort == {}


class TestListing:
    def test_listing_requires_open_collection(self, dao):
        with pytest.raises(RuntimeError):
            CollectionBrowser(dao).refresh()

    def test_backend_error_keeps_previous_page(self, browser: CollectionBrowser, dao):
        previous = list(browser.documents)
        dao.fail_next = BackendError("list documents", "timed out")

        with pytest.raises(BackendError):
            browser.refresh()

        assert browser.documents == previous
        assert browser.state.count == 120

    def test_failed_next_page_keeps_cursor(self, browser: CollectionBrowser, dao):
        dao.fail_next = BackendError("list documents", "timed out")

        with pytest.raises(BackendError):
            browser.next_page()

        assert browser.state.page == 0
        assert browser.documents[0]["n"] == 0
        assert browser.next_page() is True
        assert browser.state.page == 50
        assert browser.documents[0]["n"] == 50

    def test_failed_prev_page_keeps_cursor(self, browser: CollectionBrowser, dao):
        browser.next_page()
        dao.fail_next = BackendError("list documents", "timed out")

        with pytest.raises(BackendError):
            browser.prev_page()

        assert browser.state.page == 50
        assert browser.documents[0]["n"] == 50

    def test_failed_filter_keeps_previous_filter(self, browser: CollectionBrowser, dao):
        browser.apply_filter_text("{ status: 'new' }")
        browser.next_page()
        before = CollectionState(**vars(browser.state))
        dao.fail_next = BackendError("list documents", "timed out")

        with pytest.raises(BackendError):
            browser.apply_filter_text("{ status: 'paid' }")

        assert browser.state == before

    def test_failed_sort_keeps_previous_sort(self, browser: CollectionBrowser, dao):
        dao.fail_next = BackendError("list documents", "timed out")

        with pytest.raises(BackendError):
            browser.apply_sort_text("{ n: -1 }")

        assert browser.state.sort == {}
        assert browser.documents[0]["n"] == 0

    def test_failed_open_keeps_shown_collection(self, browser: CollectionBrowser, dao):
        browser.apply_filter_text("{ status: 'new' }")
        dao.fail_next = BackendError("list documents", "timed out")

        with pytest.raises(BackendError):
            browser.open("shop", "users")

        assert (browser.state.db, browser.state.coll) == ("shop", "orders")
        assert browser.state.filter == {"status": "new"}

    def test_field_names_follow_listed_documents(self, browser: CollectionBrowser):
        assert browser.field_names == ["_id", "n", "status"]
        browser.open("shop", "users")
        assert browser.field_names == ["_id", "address", "address.city", "address.zip", "name"]

    def test_delete_relists(self, browser: CollectionBrowser, dao):
        browser.delete(0)
        assert browser.state.count == 119
        assert browser.documents[0]["n"] == 1

    def test_describe(self, browser: CollectionBrowser):
        browser.apply_sort_text("{ n: 1 }")
        assert browser.state.describe() == "Documents: 120, Page: 0, Limit: 50, Sort: {'n': 1}"


class TestEditing:
    def test_edit_requires_pipeline(self, browser: CollectionBrowser):
        with pytest.raises(RuntimeError):
            browser.insert()

    def test_committed_edit_relists(self, dao, scripted_editor):
        editor = scripted_editor(lambda text: text.replace('"Ada"', '"Grace"'))
        browser = CollectionBrowser(dao, DocumentEditPipeline(dao, None, editor))
        browser.open("shop", "users")

        outcome = browser.edit(json.dumps(browser.documents[0]))

        assert outcome.committed
        assert browser.documents[0]["name"] == "Grace"

    def test_rejected_edit_does_not_relist(self, dao, scripted_editor):
        browser = CollectionBrowser(dao, DocumentEditPipeline(dao, None, scripted_editor()))
        browser.open("shop", "users")
        calls = len(dao.list_calls)

        outcome = browser.edit(json.dumps(browser.documents[0]))

        assert not outcome.committed
        assert len(dao.list_calls) == calls


def test_infer_field_names():
    documents = [
        {"_id": 1, "tags": ["a", "b"], "meta": {"created": 1, "deep": {"x": 1}}},
        {"_id": 2, "name": "x"},
    ]
    assert infer_field_names(documents) == ["_id", "meta", "meta.created", "meta.deep", "name", "tags"]


def test_infer_field_names_empty():
    assert infer_field_names([]) == []
