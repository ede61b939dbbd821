import asyncio

import pytest

from search_intent.models.schemas import Category
from search_intent.service.search_box import SearchBox, SelectionState

CAFE_QUERY = "คาเฟ่พะเยา"
CAFE_URL = "/guide?search=%E0%B8%84%E0%B8%B2%E0%B9%80%E0%B8%9F%E0%B9%88%E0%B8%9E%E0%B8%B0%E0%B9%80%E0%B8%A2%E0%B8%B2"


def make_box(**kwargs):
    navigations = []
    computed = []
    kwargs.setdefault("show_suggestions", True)
    kwargs.setdefault("debounce_seconds", 0.03)
    box = SearchBox(navigations.append, on_suggestions=lambda s: computed.append(list(s)), **kwargs)
    return box, navigations, computed


@pytest.mark.asyncio
async def test_typing_quickly_computes_suggestions_once():
    box, _, computed = make_box()
    box.focus()
    for text in ("a", "ab", "abc"):
        box.change(text)
        await asyncio.sleep(0.005)
    assert box.is_loading
    await box.wait_for_suggestions()

    assert len(computed) == 1
    assert all('"abc"' in s.text for s in computed[0])
    assert not box.is_loading
    assert box.dropdown_visible


@pytest.mark.asyncio
async def test_clearing_input_clears_suggestions_immediately():
    box, _, computed = make_box()
    box.focus()
    box.change("งาน")
    await box.wait_for_suggestions()
    assert [s.id for s in box.suggestions] == ["job-1"]

    box.change("ab")
    box.change("")
    assert box.suggestions == []
    assert not box.is_loading
    # popular searches are back on display
    assert [s.id for s in box.displayed] == ["1", "2", "3", "4"]

    await asyncio.sleep(0.06)
    assert len(computed) == 1


def test_focus_opens_without_selection():
    box, _, _ = make_box()
    assert box.state is SelectionState.CLOSED
    box.focus()
    assert box.state is SelectionState.OPEN_NO_SELECTION
    assert box.dropdown_visible


def test_arrow_keys_are_clamped():
    box, _, _ = make_box()
    box.focus()

    for _ in range(3):
        box.key_down("ArrowDown")
    assert box.selected_index == 2
    assert box.state is SelectionState.OPEN_SELECTION

    for _ in range(5):
        box.key_down("ArrowDown")
    assert box.selected_index == 3

    box.selected_index = 0
    box.key_down("ArrowUp")
    assert box.selected_index == -1
    box.key_down("ArrowUp")
    assert box.selected_index == -1


def test_enter_commits_selected_popular_search():
    box, navigations, _ = make_box()
    box.focus()
    box.key_down("ArrowDown")
    box.key_down("ArrowDown")

    navigation = box.key_down("Enter")

    assert navigation.url == box.popular[1].url
    assert navigations == [navigation]
    assert box.query == ""
    assert box.state is SelectionState.CLOSED


@pytest.mark.asyncio
async def test_enter_without_selection_uses_classifier():
    box, navigations, computed = make_box()
    box.focus()
    box.change(CAFE_QUERY)
    await box.wait_for_suggestions()
    assert any(s.url == CAFE_URL for s in computed[0])

    navigation = box.key_down("Enter")

    assert navigation.url == CAFE_URL
    assert navigation.category is Category.GUIDES
    assert navigations == [navigation]
    assert box.query == CAFE_QUERY
    assert not box.is_open
    assert not box.focused


@pytest.mark.asyncio
async def test_enter_on_selected_suggestion_navigates_and_clears():
    box, navigations, _ = make_box()
    box.focus()
    box.change("xyz")
    await box.wait_for_suggestions()
    box.key_down("ArrowDown")
    box.key_down("ArrowDown")

    navigation = box.key_down("Enter")

    assert navigation.url == "/jobs?search=xyz"
    assert navigations == [navigation]
    assert box.query == ""
    assert box.suggestions == []


def test_escape_closes_and_blurs():
    box, _, _ = make_box()
    box.focus()
    box.key_down("ArrowDown")
    box.key_down("Escape")
    assert box.state is SelectionState.CLOSED
    assert not box.focused


@pytest.mark.asyncio
async def test_click_outside_keeps_query():
    box, navigations, _ = make_box()
    box.focus()
    box.change("ที่พัก")
    box.click_outside()
    assert box.query == "ที่พัก"
    assert not box.is_open
    assert navigations == []
    box.dispose()


def test_select_by_click():
    box, navigations, _ = make_box()
    box.focus()
    navigation = box.select(2)
    assert navigation.category is Category.MARKET
    assert navigations == [navigation]
    assert box.select(10) is None


def test_submit_blank_query_is_noop():
    box, navigations, _ = make_box()
    box.focus()
    assert box.submit() is None
    assert navigations == []
    assert box.is_open


def test_on_search_hook_replaces_navigation():
    searched = []
    box, navigations, _ = make_box(show_suggestions=False, on_search=searched.append)
    box.focus()
    box.change("หางาน")
    assert box.submit() is None
    assert searched == ["หางาน"]
    assert navigations == []
    assert not box.is_open


def test_disabled_suggestions_hide_dropdown():
    box, navigations, computed = make_box(show_suggestions=False)
    box.focus()
    assert not box.dropdown_visible
    box.key_down("ArrowDown")
    assert box.selected_index == -1

    box.change("หางาน")
    assert box.suggestions == []
    navigation = box.key_down("Enter")
    assert navigation.url.startswith("/jobs?search=")
    assert computed == []


def test_suggestions_are_off_by_default():
    navigations = []
    box = SearchBox(navigations.append)
    box.focus()
    assert box.is_open
    assert not box.dropdown_visible
    box.change("หางาน")
    assert not box.is_loading
    assert box.key_down("Enter").category is Category.JOBS
