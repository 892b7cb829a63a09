"""Integration-style tests for :mod:`canvasprint.api`."""

from __future__ import annotations

import asyncio
import logging

import httpx
import pytest
from lxml import etree

from canvasprint import CaptureError, ExportPipeline, create_pipeline
from canvasprint.api import CONSOLE_LOGGER
from canvasprint.config import DEVELOPMENT, PRODUCTION, ExportSettings
from canvasprint.obs.events import LOG_PORT, PRINT_PORT
from canvasprint.sinks import DownloadSink
from canvasprint.snapshot import SVG_NS, XML_DECLARATION
from canvasprint.styles import InlineStyleSource, LinkedStyleSource, StyleResolver
from canvasprint.view import LiveView

_NS = {"svg": SVG_NS}
LINK_HEAD = '<link rel="stylesheet" href="assets/index.css"/>'


class RecordingSink:
    def __init__(self, standalone: bool = True) -> None:
        self.standalone = standalone
        self.documents: list[str] = []

    def deliver(self, document: str) -> None:
        self.documents.append(document)


def _pipeline(view: LiveView, *, mode: str, handler=None, **settings) -> tuple[ExportPipeline, RecordingSink]:
    client = None
    if handler is not None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    resolver = StyleResolver(
        sources={
            DEVELOPMENT: InlineStyleSource(),
            PRODUCTION: LinkedStyleSource(base_url="https://draw.example/", client=client),
        },
        mode=lambda: mode,
    )
    pipeline = ExportPipeline(
        view=view,
        settings=ExportSettings(sink="recording", **settings),
        resolver=resolver,
    )
    sink = RecordingSink()
    pipeline.sinks.register("recording", sink)
    pipeline.connect()
    return pipeline, sink


def _styles(document: str) -> list[str]:
    root = etree.fromstring(document.split("\n", 1)[-1].encode("utf-8"))
    return [style.text or "" for style in root.findall("svg:style", _NS)]


@pytest.mark.anyio("asyncio")
async def test_development_export_inlines_style_node(make_page):
    view = LiveView.from_string(make_page())
    pipeline, sink = _pipeline(view, mode=DEVELOPMENT)

    document = await pipeline.export()

    assert sink.documents == [document]
    assert document.startswith(XML_DECLARATION)
    assert _styles(document) == [".rect{fill:red}"]
    assert document.index("<style>") < document.index("<rect")


@pytest.mark.anyio("asyncio")
async def test_production_export_with_missing_stylesheet_embeds_empty_style(make_page):
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="Not Found")

    view = LiveView.from_string(make_page(head=LINK_HEAD))
    pipeline, sink = _pipeline(view, mode=PRODUCTION, handler=handler)

    document = await pipeline.export()

    assert _styles(document) == [""]
    assert sink.documents == [document]


@pytest.mark.anyio("asyncio")
async def test_production_export_embeds_fetched_stylesheet(make_page):
    async def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == "https://draw.example/assets/index.css"
        return httpx.Response(200, text=".rect{stroke:black}")

    view = LiveView.from_string(make_page(head=LINK_HEAD))
    pipeline, _ = _pipeline(view, mode=PRODUCTION, handler=handler)

    assert _styles(await pipeline.export()) == [".rect{stroke:black}"]


@pytest.mark.anyio("asyncio")
async def test_missing_graphic_raises_and_skips_sink(make_page):
    view = LiveView.from_string(make_page(graphic='<svg id="other"/>'))
    pipeline, sink = _pipeline(view, mode=DEVELOPMENT)

    with pytest.raises(CaptureError):
        await pipeline.export()
    assert sink.documents == []


@pytest.mark.anyio("asyncio")
async def test_print_port_swallows_capture_error(make_page, caplog):
    view = LiveView.from_string(make_page(graphic="<p>nothing to draw</p>"))
    pipeline, sink = _pipeline(view, mode=DEVELOPMENT)

    with caplog.at_level(logging.ERROR):
        results = await asyncio.gather(*pipeline.bus.send(PRINT_PORT, {"ignored": True}))

    assert results == [None]
    assert sink.documents == []
    assert "Export aborted" in caplog.text


@pytest.mark.anyio("asyncio")
async def test_print_port_exports_and_leaves_live_view_intact(make_page):
    view = LiveView.from_string(make_page())
    before = LiveView.serialize(view.root)
    pipeline, sink = _pipeline(view, mode=DEVELOPMENT)

    first = await asyncio.gather(*pipeline.bus.send(PRINT_PORT))
    second = await asyncio.gather(*pipeline.bus.send(PRINT_PORT))

    assert first == second
    assert sink.documents == first + second
    assert LiveView.serialize(view.root) == before


@pytest.mark.anyio("asyncio")
async def test_connect_is_idempotent(make_page):
    view = LiveView.from_string(make_page())
    pipeline, sink = _pipeline(view, mode=DEVELOPMENT)
    pipeline.connect()

    await asyncio.gather(*pipeline.bus.send(PRINT_PORT))

    assert len(sink.documents) == 1


def test_log_port_forwards_payload_verbatim(make_page, caplog):
    view = LiveView.from_string(make_page())
    pipeline, _ = _pipeline(view, mode=DEVELOPMENT)

    with caplog.at_level(logging.INFO, logger=CONSOLE_LOGGER):
        assert pipeline.bus.send(LOG_PORT, {"msg": "clicked", "x": 3}) == []

    assert [record.getMessage() for record in caplog.records] == ["{'msg': 'clicked', 'x': 3}"]


@pytest.mark.anyio("asyncio")
async def test_overlapping_exports_complete_in_completion_order(make_page):
    release = asyncio.Event()
    calls = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            await release.wait()
            return httpx.Response(200, text=".slow{}")
        return httpx.Response(200, text=".fast{}")

    view = LiveView.from_string(make_page(head=LINK_HEAD))
    pipeline, sink = _pipeline(view, mode=PRODUCTION, handler=handler)

    slow = asyncio.ensure_future(pipeline.export())
    await asyncio.sleep(0.01)
    await pipeline.export()
    release.set()
    await slow

    assert [_styles(document) for document in sink.documents] == [[".fast{}"], [".slow{}"]]


@pytest.mark.anyio("asyncio")
async def test_single_flight_serializes_exports(make_page):
    release = asyncio.Event()
    calls = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            await release.wait()
            return httpx.Response(200, text=".slow{}")
        return httpx.Response(200, text=".fast{}")

    view = LiveView.from_string(make_page(head=LINK_HEAD))
    pipeline, sink = _pipeline(view, mode=PRODUCTION, handler=handler, single_flight=True)

    slow = asyncio.ensure_future(pipeline.export())
    await asyncio.sleep(0.01)
    fast = asyncio.ensure_future(pipeline.export())
    await asyncio.sleep(0.01)
    assert calls == 1
    release.set()
    await asyncio.gather(slow, fast)

    assert [_styles(document) for document in sink.documents] == [[".slow{}"], [".fast{}"]]


@pytest.mark.anyio("asyncio")
async def test_default_download_sink_writes_file(make_page, tmp_path, monkeypatch):
    monkeypatch.setenv("CANVASPRINT_ENV", DEVELOPMENT)
    monkeypatch.setenv("CANVASPRINT_OUTPUT_DIR", str(tmp_path))
    view = LiveView.from_string(make_page())
    pipeline = create_pipeline(view)

    await asyncio.gather(*pipeline.bus.send(PRINT_PORT))

    written = (tmp_path / "drawing.svg").read_text(encoding="utf-8")
    assert written.startswith(XML_DECLARATION)
    assert _styles(written) == [".rect{fill:red}"]
    assert view.root.xpath("//*[local-name()='a']") == []


@pytest.mark.anyio("asyncio")
async def test_diagnostic_sink_omits_declaration(make_page, caplog, monkeypatch):
    monkeypatch.setenv("CANVASPRINT_ENV", DEVELOPMENT)
    monkeypatch.setenv("CANVASPRINT_SINK", "diagnostic")
    pipeline = create_pipeline(LiveView.from_string(make_page()))

    with caplog.at_level(logging.INFO, logger="canvasprint.diagnostic"):
        document = await pipeline.export()

    assert not document.startswith("<?xml")
    assert document in caplog.text


def test_unknown_sink_name_is_rejected(make_page):
    pipeline = ExportPipeline(
        view=LiveView.from_string(make_page()),
        settings=ExportSettings(sink="printer"),
    )

    with pytest.raises(KeyError):
        pipeline.sink


@pytest.mark.anyio("asyncio")
async def test_print_port_swallows_sink_failures(make_page, caplog):
    view = LiveView.from_string(make_page())
    pipeline, _ = _pipeline(view, mode=DEVELOPMENT)

    def downloader(filename: str, href: str) -> None:
        raise OSError("disk full")

    pipeline.sinks.register("recording", DownloadSink(view=view, downloader=downloader))

    with caplog.at_level(logging.ERROR):
        results = await asyncio.gather(*pipeline.bus.send(PRINT_PORT))

    assert results == [None]
    assert view.root.xpath("//*[local-name()='a']") == []
    assert "Export aborted" in caplog.text


@pytest.mark.anyio("asyncio")
async def test_print_port_swallows_unknown_sink(make_page, caplog):
    pipeline = ExportPipeline(
        view=LiveView.from_string(make_page()),
        settings=ExportSettings(sink="printer"),
    )
    pipeline.connect()

    with caplog.at_level(logging.ERROR):
        results = await asyncio.gather(*pipeline.bus.send(PRINT_PORT))

    assert results == [None]
    assert "Export aborted" in caplog.text


def test_default_resolver_is_built_from_settings(make_page):
    pipeline = ExportPipeline(
        view=LiveView.from_string(make_page()),
        settings=ExportSettings(base_url="https://cdn.example/app/", fetch_timeout=1.5),
    )

    linked = pipeline.style_resolver.source_for(PRODUCTION)
    assert isinstance(linked, LinkedStyleSource)
    assert linked.base_url == "https://cdn.example/app/"
    assert linked.timeout == 1.5
    assert isinstance(pipeline.style_resolver.source_for(DEVELOPMENT), InlineStyleSource)


def test_injected_resolver_is_used(make_page):
    resolver = StyleResolver(mode=lambda: DEVELOPMENT)
    pipeline = ExportPipeline(view=LiveView.from_string(make_page()), settings=ExportSettings(), resolver=resolver)

    assert pipeline.style_resolver is resolver
