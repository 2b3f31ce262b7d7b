"""Tests for the page() and paged() helpers."""

import io
import shutil
import subprocess

import pytest

from pagedsink.config import PagerConfig, PagingPolicy
from pagedsink.errors import ClosedByConsumer, NoCommandConfigured
from pagedsink.page import page, paged


NOTHING_CONFIGURED = PagerConfig(policy=PagingPolicy.ALWAYS, lookup=lambda name: None)

needs_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="sh not available")


class TestPage:
    """Tests for page()."""

    def test_text_is_encoded(self):
        out = io.BytesIO()

        page("héllo\n", command="less", destination=out)

        assert out.getvalue() == "héllo\n".encode("utf-8")

    def test_bytes_pass_unchanged(self):
        out = io.BytesIO()

        page(b"\x00\xff", command="less", destination=out)

        assert out.getvalue() == b"\x00\xff"

    def test_custom_encoding(self):
        out = io.BytesIO()

        page("é", command="less", destination=out, encoding="latin-1")

        assert out.getvalue() == b"\xe9"

    def test_fallback_without_command(self):
        """No pager configured: content is written directly."""
        out = io.BytesIO()

        page("plain", destination=out, config=NOTHING_CONFIGURED)

        assert out.getvalue() == b"plain"

    def test_no_fallback_raises(self):
        with pytest.raises(NoCommandConfigured):
            page("plain", destination=io.BytesIO(), config=NOTHING_CONFIGURED, fallback=False)

    def test_fallback_when_spawn_impossible(self):
        """A destination without a descriptor cannot feed a pager."""
        out = io.BytesIO()
        config = PagerConfig(policy=PagingPolicy.ALWAYS)

        page("direct", command="cat", destination=out, config=config)

        assert out.getvalue() == b"direct"

    @needs_sh
    def test_pager_quitting_early_is_not_an_error(self, tmp_path):
        config = PagerConfig(policy=PagingPolicy.ALWAYS)
        with open(tmp_path / "out", "wb") as out:
            page(b"x" * (1 << 20), command="exit 0", destination=out, config=config)

    @needs_sh
    def test_pager_failure_propagates(self, tmp_path):
        config = PagerConfig(policy=PagingPolicy.ALWAYS)
        with open(tmp_path / "out", "wb") as out:
            with pytest.raises(subprocess.CalledProcessError):
                page("text", command="cat >/dev/null; exit 5", destination=out, config=config)

    @needs_sh
    def test_through_cat(self, tmp_path):
        config = PagerConfig(policy=PagingPolicy.ALWAYS)
        path = tmp_path / "out"
        with open(path, "wb") as out:
            page("line 1\nline 2\n", command="cat", destination=out, config=config)

        assert path.read_text() == "line 1\nline 2\n"


class TestPaged:
    """Tests for the paged() context manager."""

    def test_yields_open_sink(self):
        out = io.BytesIO()

        with paged("less", out) as sink:
            sink.write(b"inside")

        assert sink.closed
        assert out.getvalue() == b"inside"

    def test_consumer_exit_in_body_is_swallowed(self):
        class HungUp:
            def write(self, data):
                raise BrokenPipeError()

        with paged("less", HungUp()) as sink:
            sink.write(b"lost")
            pytest.fail("write should have raised")

        assert isinstance(sink.error, ClosedByConsumer)

    def test_other_errors_propagate(self):
        with pytest.raises(KeyError):
            with paged("less", io.BytesIO()):
                raise KeyError("body")

    def test_open_errors_propagate(self):
        with pytest.raises(NoCommandConfigured):
            with paged("", io.BytesIO(), NOTHING_CONFIGURED):
                pass
