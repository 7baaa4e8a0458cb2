"""Unit tests for the initialize/query entry points."""

import logging

import pytest

from mdindex import Settings, initialize, query
from mdindex import engine as engine_module
from mdindex.domain.search import SearchPage
from mdindex.observability.logging import JsonFormatter
from mdindex.services.rebuild_scheduler import get_active_scheduler


class TestInitialize:
    @pytest.mark.asyncio
    async def test_builds_index_without_scheduler_when_disabled(self, data_dir, settings, write_doc):
        write_doc("a.md", "alpha")

        handle = await initialize(data_dir, 0, settings=settings)

        assert handle.document_count == 1
        assert handle.scheduler is None
        assert get_active_scheduler() is None
        assert handle.persist_pending is False

    @pytest.mark.asyncio
    async def test_positive_interval_arms_scheduler(self, data_dir, settings):
        handle = await initialize(data_dir, 6, settings=settings)

        try:
            assert handle.scheduler is not None
            assert handle.scheduler.running is True
            assert handle.scheduler.interval_hours == 6
            assert get_active_scheduler() is handle.scheduler
        finally:
            await handle.close()

        assert get_active_scheduler() is None

    @pytest.mark.asyncio
    async def test_interval_defaults_to_settings(self, data_dir, cache_dir):
        settings = Settings(cache_dir=cache_dir, auto_rebuild_interval_hours=-3)

        handle = await initialize(data_dir, settings=settings)

        assert handle.scheduler is None

    @pytest.mark.asyncio
    async def test_reinitialize_replaces_active_scheduler(self, data_dir, settings):
        first = await initialize(data_dir, 1, settings=settings)
        second = await initialize(data_dir, 2, settings=settings)

        try:
            assert first.scheduler.running is False
            assert get_active_scheduler() is second.scheduler
        finally:
            await first.close()
            await second.close()

    @pytest.mark.asyncio
    async def test_settings_are_loaded_from_environment(self, data_dir, cache_dir, monkeypatch, write_doc):
        monkeypatch.setenv("CACHE_DIR", str(cache_dir))
        write_doc("a.md", "alpha")

        handle = await initialize(str(data_dir))

        assert handle.settings.resolved_cache_dir() == cache_dir
        assert handle.scheduler is None
        assert any(cache_dir.iterdir())

    @pytest.mark.asyncio
    async def test_data_dir_defaults_to_settings(self, data_dir, cache_dir, write_doc):
        write_doc("a.md", "alpha")
        settings = Settings(data_dir=data_dir, cache_dir=cache_dir, auto_rebuild_interval_hours=0)

        handle = await initialize(settings=settings)

        assert handle.data_dir == data_dir
        assert handle.document_count == 1

    @pytest.mark.asyncio
    async def test_observability_setup_installs_logging_and_tracing(self, data_dir, cache_dir, monkeypatch):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        tracing_calls: list[str] = []
        monkeypatch.setattr(engine_module, "init_tracing", lambda service_name: tracing_calls.append(service_name))
        settings = Settings(
            cache_dir=cache_dir,
            auto_rebuild_interval_hours=0,
            log_level="warning",
            log_json=True,
            observability_setup=True,
        )

        try:
            await initialize(data_dir, settings=settings)

            assert root.level == logging.WARNING
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JsonFormatter)
            assert tracing_calls == ["mdindex"]
        finally:
            root.handlers[:] = handlers
            root.setLevel(level)

    @pytest.mark.asyncio
    async def test_observability_setup_can_be_disabled(self, data_dir, settings, monkeypatch):
        calls: list[Settings] = []
        monkeypatch.setattr(engine_module, "configure_observability", calls.append)

        await initialize(data_dir, settings=settings)

        assert settings.observability_setup is False
        assert calls == []


class TestQuery:
    @pytest.fixture
    def corpus(self, data_dir, write_doc):
        write_doc("en.md", "Search engines\nsearch here\nnothing")
        write_doc("zh.md", "全文搜索引擎\n搜索")
        return data_dir

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_query_returns_empty_page(self, corpus, settings, text):
        handle = await initialize(corpus, 0, settings=settings)
        assert query(handle, text) == SearchPage.empty()

    @pytest.mark.asyncio
    async def test_non_string_query_returns_empty_page(self, corpus, settings):
        handle = await initialize(corpus, 0, settings=settings)
        assert query(handle, None) == SearchPage.empty()  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_query_text_is_stripped(self, corpus, settings):
        handle = await initialize(corpus, 0, settings=settings)
        page = query(handle, "  search  ")

        assert page.total == 1
        assert page.results[0].hits[0].line_num == 2

    @pytest.mark.asyncio
    async def test_phrase_query(self, corpus, settings):
        handle = await initialize(corpus, 0, settings=settings)
        page = query(handle, "搜索引擎")

        assert [result.name for result in page.results] == ["zh.md"]
        assert page.results[0].hits[0].content == "全文搜索引擎"

    @pytest.mark.asyncio
    async def test_invalid_page_falls_back_to_first(self, corpus, settings):
        handle = await initialize(corpus, 0, settings=settings)
        assert query(handle, "search", "abc").page == 1  # type: ignore[arg-type]
        assert query(handle, "search", None).page == 1  # type: ignore[arg-type]
        assert query(handle, "search", "1").page == 1  # type: ignore[arg-type]
        assert query(handle, "search", float("inf")).page == 1  # type: ignore[arg-type]
        assert query(handle, "search", float("-inf")).page == 1  # type: ignore[arg-type]
        assert query(handle, "search", float("nan")).page == 1  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_payload_uses_wire_names(self, corpus, settings):
        handle = await initialize(corpus, 0, settings=settings)
        payload = query(handle, "search").to_payload()

        assert set(payload) == {"results", "page", "totalPages", "total"}
        assert payload["results"][0]["hits"][0] == {"lineNum": 2, "content": "search here"}

    @pytest.mark.asyncio
    async def test_configured_page_size_is_used(self, data_dir, cache_dir, write_doc):
        for i in range(5):
            write_doc(f"{i}.md", "needle")
        settings = Settings(cache_dir=cache_dir, auto_rebuild_interval_hours=0, page_size=2, max_hits_per_result=1)
        handle = await initialize(data_dir, settings=settings)

        page = query(handle, "needle", 3)

        assert len(page.results) == 1
        assert page.total_pages == 3
        assert page.total == 5
