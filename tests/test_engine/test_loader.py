"""Tests for configuration discovery and loading (dyntemplate.engine.loader).

Covers:
- Candidate source discovery order
- Missing sources are empty contributions
- Variables and helpers visible to configuration code
- Last-write-wins merging in declared order
- Evaluation errors are logged and isolated per source
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from dyntemplate.config import Settings
from dyntemplate.engine.context import HostState, build_context
from dyntemplate.engine.errors import ConfigEvaluationError
from dyntemplate.engine.loader import (
    ConfigLoader,
    evaluate_source,
    find_config_sources,
    load_config,
)
from dyntemplate.engine.models import FileTemplate

pytestmark = pytest.mark.unit


@pytest.fixture
def loader(helpers, fixed_now) -> ConfigLoader:
    host = HostState(active_file="/proj/src/main.py")
    return ConfigLoader(host, helpers=helpers, environ={"HOME": "/home/me"}, clock=lambda: fixed_now)


# ---------------------------------------------------------------------------
# find_config_sources
# ---------------------------------------------------------------------------


class TestFindConfigSources:
    def test_order(self):
        settings = Settings(config_files=["/explicit/a.py", "/explicit/b.py"])
        host = HostState(workspace_folders=["/ws1", "/ws2"])
        sources = find_config_sources(
            settings, host, environ={"HOME": "/home/me", "USERPROFILE": "/profile"}
        )
        expected_tail = [
            Path("/ws1/.vscode/extensions/dynamic-template/template.py"),
            Path("/ws2/.vscode/extensions/dynamic-template/template.py"),
            Path("/home/me/.vscode/extensions/dynamic-template/template.py"),
            Path("/profile/.vscode/extensions/dynamic-template/template.py"),
        ]
        assert sources[:2] == ["/explicit/a.py", "/explicit/b.py"]
        assert [Path(s) for s in sources[2:]] == expected_tail

    def test_no_environment(self):
        assert find_config_sources(Settings(), HostState(), environ={}) == []

    def test_custom_extension_id(self):
        settings = Settings(extension_id="tai.dynamic-template")
        sources = find_config_sources(settings, HostState(), environ={"HOME": "/h"})
        assert Path(sources[0]) == Path("/h/.vscode/extensions/tai.dynamic-template/template.py")


# ---------------------------------------------------------------------------
# evaluate_source
# ---------------------------------------------------------------------------


class TestEvaluateSource:
    def _context(self, helpers, fixed_now):
        return build_context("/cfg", HostState(), now=fixed_now, environ={}, helpers=helpers)

    def test_returns_get_template_result(self, helpers, fixed_now):
        code = "def get_template():\n    return {'T': [{'path': YMD + '.md'}]}\n"
        result = evaluate_source(code, "/cfg/template.py", self._context(helpers, fixed_now))
        assert result == {"T": [{"path": "20240105.md"}]}

    def test_module_file_is_source(self, helpers, fixed_now):
        code = "def get_template():\n    return {'T': [{'path': __file__}]}\n"
        result = evaluate_source(code, "/cfg/template.py", self._context(helpers, fixed_now))
        assert result["T"][0]["path"] == "/cfg/template.py"

    def test_syntax_error(self, helpers, fixed_now):
        with pytest.raises(ConfigEvaluationError, match="SyntaxError"):
            evaluate_source("def get_template(:\n", "src", self._context(helpers, fixed_now))

    def test_missing_entry_point(self, helpers, fixed_now):
        with pytest.raises(ConfigEvaluationError, match="does not define get_template"):
            evaluate_source("x = 1\n", "src", self._context(helpers, fixed_now))

    def test_entry_point_raises(self, helpers, fixed_now):
        code = "def get_template():\n    raise ValueError('nope')\n"
        with pytest.raises(ConfigEvaluationError, match="ValueError: nope"):
            evaluate_source(code, "src", self._context(helpers, fixed_now))

    def test_module_registered_only_while_running(self, helpers, fixed_now):
        code = (
            "import sys\n"
            "def get_template():\n"
            "    return {'T': [{'path': __name__, 'body': str(__name__ in sys.modules)}]}\n"
        )
        result = evaluate_source(code, "src", self._context(helpers, fixed_now))
        name = result["T"][0]["path"]
        assert name.startswith("dyntemplate_config_")
        assert result["T"][0]["body"] == "True"
        assert name not in sys.modules

    def test_module_removed_after_failure(self, helpers, fixed_now):
        before = {m for m in sys.modules if m.startswith("dyntemplate_config_")}
        with pytest.raises(ConfigEvaluationError):
            evaluate_source("raise RuntimeError\n", "src", self._context(helpers, fixed_now))
        assert {m for m in sys.modules if m.startswith("dyntemplate_config_")} == before


# ---------------------------------------------------------------------------
# ConfigLoader.load
# ---------------------------------------------------------------------------


class TestConfigLoader:
    @pytest.mark.asyncio
    async def test_missing_source_is_empty(self, loader, tmp_path):
        assert await loader.load([str(tmp_path / "nope" / "template.py")]) == {}

    @pytest.mark.asyncio
    async def test_no_sources(self, loader):
        assert await loader.load([]) == {}

    @pytest.mark.asyncio
    async def test_loads_static_template(self, loader, write_config):
        src = write_config(
            "template.py",
            """
            def get_template():
                return {"T": [{"path": "out.txt", "body": "hi"}]}
            """,
        )
        templates = await loader.load([src])
        assert templates == {"T": [FileTemplate(path="out.txt", body="hi")]}

    @pytest.mark.asyncio
    async def test_variables_visible_to_closures(self, loader, write_config, tmp_path):
        src = write_config(
            "cfg/template.py",
            """
            def get_template():
                return {
                    "T": [{
                        "path": lambda: f"{HOME}/{YMD}-{HOUR}{MIN}.md",
                        "body": lambda path: f"{file} {file_dirname} {config_dir}",
                    }],
                }
            """,
        )
        templates = await loader.load([src])
        tp = templates["T"][0]
        assert await tp.resolve_path() == "/home/me/20240105-0907.md"
        assert await tp.resolve_body("x") == f"/proj/src/main.py /proj/src {tmp_path / 'cfg'}"

    @pytest.mark.asyncio
    async def test_helpers_visible_to_hooks(self, loader, write_config, helpers):
        src = write_config(
            "template.py",
            """
            def get_template():
                return {"T": [{"path": "a", "hook": lambda path, body: vsopen(path)}]}
            """,
        )
        templates = await loader.load([src])
        await templates["T"][0].run_hook("/x/a", None)
        helpers.vsopen.assert_called_once_with("/x/a")

    @pytest.mark.asyncio
    async def test_config_dir_differs_per_source(self, loader, write_config, tmp_path):
        code = """
            def get_template():
                return {NAME: [{"path": config_dir}]}
            """
        a = write_config("a/template.py", code.replace("NAME", "'A'"))
        b = write_config("b/template.py", code.replace("NAME", "'B'"))
        templates = await loader.load([a, b])
        assert templates["A"][0].path == str(tmp_path / "a")
        assert templates["B"][0].path == str(tmp_path / "b")

    @pytest.mark.asyncio
    async def test_later_source_wins(self, loader, write_config):
        first = write_config(
            "first.py",
            """
            def get_template():
                return {"Shared": [{"path": "first"}], "OnlyFirst": [{"path": "f"}]}
            """,
        )
        second = write_config(
            "second.py",
            """
            def get_template():
                return {"Shared": [{"path": "second"}]}
            """,
        )
        templates = await loader.load([first, second])
        assert templates["Shared"] == [FileTemplate(path="second")]
        assert templates["OnlyFirst"] == [FileTemplate(path="f")]

        reversed_templates = await loader.load([second, first])
        assert reversed_templates["Shared"] == [FileTemplate(path="first")]

    @pytest.mark.asyncio
    async def test_merge_order_is_declared_not_completion(self, helpers, fixed_now):
        async def read_text(path):
            # The first source finishes last.
            await asyncio.sleep(0.05 if path == "slow" else 0)
            return f"def get_template():\n    return {{'T': [{{'path': '{path}'}}]}}\n"

        storage = AsyncMock()
        storage.read_text.side_effect = read_text
        loader = ConfigLoader(HostState(), storage=storage, helpers=helpers, clock=lambda: fixed_now)
        templates = await loader.load(["slow", "fast"])
        assert templates["T"][0].path == "fast"

    @pytest.mark.asyncio
    async def test_duplicate_sources_harmless(self, loader, write_config):
        src = write_config(
            "template.py",
            """
            def get_template():
                return {"T": [{"path": "a"}]}
            """,
        )
        assert await loader.load([src, src]) == {"T": [FileTemplate(path="a")]}

    @pytest.mark.asyncio
    async def test_broken_source_is_isolated(self, loader, write_config, caplog):
        good = write_config(
            "good.py",
            """
            def get_template():
                return {"Good": [{"path": "a"}]}
            """,
        )
        bad = write_config("bad.py", "def get_template(:\n")
        with caplog.at_level(logging.ERROR, logger="dyntemplate.engine.loader"):
            templates = await loader.load([good, bad])
        assert list(templates) == ["Good"]
        assert bad in caplog.text

    @pytest.mark.asyncio
    async def test_wrong_shape_is_dropped(self, loader, write_config, caplog):
        src = write_config(
            "template.py",
            """
            def get_template():
                return ["not", "a", "mapping"]
            """,
        )
        with caplog.at_level(logging.ERROR, logger="dyntemplate.engine.loader"):
            assert await loader.load([src]) == {}
        assert "must return a mapping" in caplog.text

    @pytest.mark.asyncio
    async def test_unreadable_source_is_logged(self, loader, tmp_path, caplog):
        directory = tmp_path / "template.py"
        directory.mkdir()
        with caplog.at_level(logging.ERROR, logger="dyntemplate.engine.loader"):
            assert await loader.load([str(directory)]) == {}
        assert "Cannot read template config" in caplog.text

    @pytest.mark.asyncio
    async def test_dataclass_descriptors(self, loader, write_config):
        src = write_config(
            "template.py",
            """
            from __future__ import annotations

            from dataclasses import dataclass


            @dataclass
            class Entry:
                path: str
                body: str


            def get_template():
                return {"T": [Entry("a.txt", "A")]}
            """,
        )
        templates = await loader.load([src])
        assert templates == {"T": [FileTemplate(path="a.txt", body="A")]}

    @pytest.mark.asyncio
    async def test_async_get_template(self, loader, write_config):
        src = write_config(
            "template.py",
            """
            async def get_template():
                return {"Async": [{"path": "a"}]}
            """,
        )
        assert await loader.load([src]) == {"Async": [FileTemplate(path="a")]}

    @pytest.mark.asyncio
    async def test_load_config_wrapper(self, write_config, helpers):
        src = write_config(
            "template.py",
            """
            def get_template():
                return {"T": []}
            """,
        )
        assert await load_config([src], helpers=helpers) == {"T": []}
