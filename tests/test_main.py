"""Tests for the command line entry point."""

import asyncio
import signal
import threading

import pytest
from aiohttp import web

import main
from minisearch.storage import InvertedIndex

from .helpers import make_page


def build_index(path):
    index = InvertedIndex()
    index.add_doc("http://x/2", ["python", "web"])
    index.add_doc("http://x/1", ["python"])
    index.save(path)


def test_search_prints_matching_urls(tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "index.json"
    build_index(path)

    assert main.main(["search", "python", "--index", str(path)]) == 0

    assert capsys.readouterr().out.splitlines() == ["http://x/1", "http://x/2"]


def test_search_unknown_word_prints_nothing(tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "index.json"
    build_index(path)

    assert main.main(["search", "missing", "--index", str(path)]) == 0
    assert capsys.readouterr().out == ""


def test_search_missing_index_fails(tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert main.main(["search", "python", "--index", str(tmp_path / "none.json")]) == 1
    assert "not found" in capsys.readouterr().err


def test_crawl_without_seed_fails(tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert main.main(["crawl", "--limit", "5"]) == 1
    assert "seed" in capsys.readouterr().err


def test_invalid_limit_fails(tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert main.main(["crawl", "--seed", "http://x/", "--limit", "0"]) == 1
    assert "limit" in capsys.readouterr().err


def test_config_overrides(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text(
        "crawler:\n  seed_url: http://from-file/\n  limit: 7\nindex:\n  path: file.json\n",
        encoding='utf-8'
    )
    args = main.create_parser().parse_args(["crawl", "--limit", "3", "--timeout", "1.5"])

    config = main.build_config(args)

    assert config.crawler.seed_url == "http://from-file/"
    assert config.crawler.limit == 3
    assert config.crawler.request_timeout == 1.5
    assert config.index.path == "file.json"


@pytest.mark.parametrize("text", [
    "crawler: [unclosed\n",
    "crawler:\n  limit: abc\n",
    "crawler:\n  request_timeout: soon\n",
])
def test_bad_config_file_fails(tmp_path, capsys, monkeypatch, text):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text(text, encoding='utf-8')

    assert main.main(["crawl", "--seed", "http://x/"]) == 1
    assert capsys.readouterr().err.startswith("Error:")


@pytest.fixture
def site_url():
    """Serve two linked pages from a background thread."""
    async def handler(request):
        name = request.match_info['name']
        if name == '1':
            body = make_page("alpha", ["/2"])
        else:
            body = make_page("beta", ["/1"])
        return web.Response(text=body, content_type='text/html')

    app = web.Application()
    app.router.add_get('/{name}', handler)

    loop = asyncio.new_event_loop()
    runner = web.AppRunner(app)
    loop.run_until_complete(runner.setup())
    loop.run_until_complete(web.TCPSite(runner, '127.0.0.1', 0).start())
    port = runner.addresses[0][1]
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()

    yield f"http://127.0.0.1:{port}"

    loop.call_soon_threadsafe(loop.stop)
    thread.join()
    loop.run_until_complete(runner.cleanup())
    loop.close()


@pytest.fixture
def restore_signal_handlers():
    saved = {signum: signal.getsignal(signum) for signum in (signal.SIGINT, signal.SIGTERM)}
    yield
    for signum, handler in saved.items():
        signal.signal(signum, handler)


def test_crawl_then_search(tmp_path, capsys, monkeypatch, site_url,
                           restore_root_logger, restore_signal_handlers):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "index.json"

    assert main.main(["crawl", "--seed", f"{site_url}/1", "--limit", "5",
                      "--index", str(path)]) == 0

    index = InvertedIndex.load(path)
    assert list(index.docs) == [f"{site_url}/1", f"{site_url}/2"]
    assert index.get_docs("beta") == [f"{site_url}/2"]

    capsys.readouterr()
    assert main.main(["search", "alpha", "--index", str(path)]) == 0
    out = capsys.readouterr().out
    assert f"{site_url}/1" in out.splitlines()
    assert f"{site_url}/2" not in out
