import pytest
import pytest_asyncio

from logsviewer.collector.observer import PollingChangeSource
from logsviewer.collector.tailer import Tailer
from logsviewer.config.schema import ParserConfig

from .helpers import FAST_POLL


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "app.log"
    path.write_text("")
    return path


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Run from an empty directory with an empty home so no config file is found."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    return home


@pytest_asyncio.fixture
async def make_tailer():
    """Build polling tailers with short intervals; stops them after the test."""
    tailers = []

    def factory(files, tail_lines=0, parser_config=None, **kwargs):
        kwargs.setdefault("change_source", PollingChangeSource())
        kwargs.setdefault("poll_interval", FAST_POLL)
        kwargs.setdefault("reappear_interval", FAST_POLL)
        tailer = Tailer(
            [str(f) for f in files],
            parser_config or ParserConfig(extra_fields=["level"]),
            tail_lines,
            **kwargs,
        )
        tailers.append(tailer)
        return tailer

    yield factory

    for tailer in tailers:
        tailer.stop()
        await tailer.wait_closed()
