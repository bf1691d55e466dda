"""Tests for the viewport registry."""

import asyncio

import pytest

from demosmith.core.exceptions import (
    CannotCloseLastViewportError,
    NoActiveViewportError,
    UnknownViewportError,
)
from demosmith.session.viewports import ViewportRegistry

from conftest import FakePage


def make_registry():
    pages = []

    async def factory():
        page = FakePage()
        pages.append(page)
        return page

    registry = ViewportRegistry(factory)
    registry.adopt(FakePage(url="https://example.test/"))
    return registry, pages


def test_first_adopted_page_is_active():
    registry, _ = make_registry()
    assert registry.active_id == 0
    assert registry.live_ids == [0]
    assert registry.active.url == "https://example.test/"


def test_open_does_not_change_active():
    async def run():
        registry, _ = make_registry()
        viewport_id, page = await registry.open("https://example.test/other")
        return registry, viewport_id, page

    registry, viewport_id, page = asyncio.run(run())
    assert viewport_id == 1
    assert page.url == "https://example.test/other"
    assert registry.active_id == 0
    assert len(registry) == 2


def test_ids_are_never_reused():
    async def run():
        registry, _ = make_registry()
        first, _ = await registry.open()
        await registry.close(first)
        second, _ = await registry.open()
        return first, second

    first, second = asyncio.run(run())
    assert (first, second) == (1, 2)


def test_switch_brings_page_to_front():
    async def run():
        registry, _ = make_registry()
        viewport_id, page = await registry.open()
        await registry.switch(viewport_id)
        return registry, viewport_id, page

    registry, viewport_id, page = asyncio.run(run())
    assert registry.active_id == viewport_id
    assert ("bring_to_front",) in page.actions


def test_switch_to_unknown_viewport_fails():
    registry, _ = make_registry()
    with pytest.raises(UnknownViewportError):
        asyncio.run(registry.switch(7))
    assert registry.active_id == 0


def test_closing_last_viewport_fails_and_leaves_registry_unchanged():
    registry, _ = make_registry()
    with pytest.raises(CannotCloseLastViewportError):
        asyncio.run(registry.close(0))
    assert registry.live_ids == [0]
    assert registry.active_id == 0
    assert not registry.active.is_closed()


def test_closing_active_viewport_activates_lowest_remaining_id():
    async def run():
        registry, _ = make_registry()
        await registry.open()
        await registry.open()
        await registry.open()
        await registry.switch(2)
        await registry.close(2)
        after_first_close = registry.active_id
        await registry.close(0)
        return registry, after_first_close

    registry, after_first_close = asyncio.run(run())
    assert after_first_close == 0
    assert registry.active_id == 1
    assert registry.live_ids == [1, 3]


def test_closing_inactive_viewport_keeps_active():
    async def run():
        registry, _ = make_registry()
        await registry.open()
        await registry.close(1)
        return registry

    registry = asyncio.run(run())
    assert registry.active_id == 0
    assert 1 not in registry


def test_close_unknown_viewport_fails():
    registry, _ = make_registry()
    with pytest.raises(UnknownViewportError):
        asyncio.run(registry.close(3))


def test_failed_navigation_releases_new_viewport():
    async def run():
        pages = []

        async def factory():
            page = FakePage()
            page.fail_urls.add("https://broken.test/")
            pages.append(page)
            return page

        registry = ViewportRegistry(factory)
        registry.adopt(FakePage())
        with pytest.raises(RuntimeError):
            await registry.open("https://broken.test/")
        return registry, pages

    registry, pages = asyncio.run(run())
    assert registry.live_ids == [0]
    assert pages[0].closed


def test_externally_closed_active_page_is_reported():
    registry, _ = make_registry()
    registry.active.closed = True
    with pytest.raises(NoActiveViewportError):
        registry.active


def test_list_reports_live_viewports():
    async def run():
        registry, _ = make_registry()
        await registry.open("https://example.test/docs")
        return await registry.list()

    infos = asyncio.run(run())
    assert [info.id for info in infos] == [0, 1]
    assert [info.is_active for info in infos] == [True, False]
    assert infos[1].model_dump(by_alias=True)["isActive"] is False
    assert infos[1].url == "https://example.test/docs"
