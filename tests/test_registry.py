"""
Unit tests for the capability registry and auto-loader.

Tests cover:
- Discovery of unit files by category directory
- Structural validation of exported descriptors
- Failure isolation (import errors, bad shape, raising register)
- Sync and async register functions
- Load report counts and log lines
"""

import logging
import sys
import textwrap
import uuid
from types import SimpleNamespace

import pytest

from coverity_mcp.modules.registry import (
    CapabilityKind,
    CapabilityUnit,
    auto_load_registry,
    find_module_files,
    is_capability_unit,
    load_module,
)
from coverity_mcp.modules.registry.discovery import get_module_type, qualified_name


# =============================================================================
# Helpers
# =============================================================================


def write_unit(root, category, name, body):
    directory = root / category
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.py"
    path.write_text(textwrap.dedent(body))
    return path


def tool_unit(name):
    return f"""
    from coverity_mcp.modules.registry import CapabilityKind, CapabilityUnit

    def register(host):
        host.register_tool("{name}")

    capability = CapabilityUnit(CapabilityKind.TOOL, "{name}", register)
    """


@pytest.fixture
def unit_package():
    """Unique module prefix per test; loaded modules are removed afterwards."""
    package = f"test_units_{uuid.uuid4().hex}"
    yield package
    for name in [m for m in sys.modules if m.startswith(package)]:
        del sys.modules[name]


# =============================================================================
# Descriptor validation
# =============================================================================


class TestIsCapabilityUnit:
    def test_accepts_descriptor(self):
        unit = CapabilityUnit(CapabilityKind.PROMPT, "p", lambda host: None)
        assert is_capability_unit(unit)

    def test_accepts_plain_object_with_string_kind(self):
        unit = SimpleNamespace(kind="resource", name="r", register=lambda host: None)
        assert is_capability_unit(unit)

    @pytest.mark.parametrize(
        "value",
        [
            None,
            42,
            SimpleNamespace(kind="widget", name="x", register=lambda host: None),
            SimpleNamespace(kind="tool", name=7, register=lambda host: None),
            SimpleNamespace(kind="tool", name="x", register="not callable"),
            SimpleNamespace(name="x", register=lambda host: None),
        ],
    )
    def test_rejects_bad_shapes(self, value):
        assert not is_capability_unit(value)


# =============================================================================
# Discovery
# =============================================================================


class TestDiscovery:
    def test_finds_files_per_category(self, tmp_path):
        write_unit(tmp_path, "tools", "b_tool", "")
        write_unit(tmp_path, "tools", "a_tool", "")
        write_unit(tmp_path, "prompts", "p", "")
        write_unit(tmp_path, "resources", "r", "")

        files = find_module_files(tmp_path)

        assert [(f.parent.name, f.stem) for f in files] == [
            ("tools", "a_tool"),
            ("tools", "b_tool"),
            ("resources", "r"),
            ("prompts", "p"),
        ]

    def test_skips_private_and_non_python_files(self, tmp_path):
        write_unit(tmp_path, "tools", "__init__", "")
        write_unit(tmp_path, "tools", "_helpers", "")
        write_unit(tmp_path, "tools", "real", "")
        (tmp_path / "tools" / "notes.txt").write_text("not a unit")
        write_unit(tmp_path, "other", "ignored", "")

        files = find_module_files(tmp_path)

        assert [f.stem for f in files] == ["real"]

    def test_missing_directories(self, tmp_path):
        assert find_module_files(tmp_path) == []
        assert find_module_files(tmp_path / "does-not-exist") == []

    def test_module_type_and_name(self, tmp_path):
        path = tmp_path / "resources" / "server_info.py"
        assert get_module_type(path) == CapabilityKind.RESOURCE
        assert qualified_name(path, "pkg") == "pkg.resources.server_info"

    def test_bundled_units_are_discovered(self):
        names = {f.stem for f in find_module_files()}
        assert names == {
            "list_projects",
            "list_streams",
            "search_issues",
            "get_issue_details",
            "server_info",
            "triage_defect",
        }

    def test_load_module_returns_export(self, tmp_path, unit_package):
        path = write_unit(tmp_path, "tools", "echo", tool_unit("echo"))

        unit = load_module(path, unit_package)

        assert unit.name == "echo"
        assert load_module(path, unit_package) is unit

    def test_load_module_without_export(self, tmp_path, unit_package):
        path = write_unit(tmp_path, "tools", "bare", "VALUE = 1\n")
        assert load_module(path, unit_package) is None

    def test_failed_import_is_not_cached(self, tmp_path, unit_package):
        path = write_unit(tmp_path, "tools", "broken", "raise RuntimeError('boom')\n")

        with pytest.raises(RuntimeError):
            load_module(path, unit_package)

        assert qualified_name(path, unit_package) not in sys.modules


# =============================================================================
# Auto-load
# =============================================================================


class TestAutoLoad:
    @pytest.mark.asyncio
    async def test_failures_are_isolated(self, tmp_path, unit_package, recording_host, caplog):
        """Four units: two valid, one with a bad shape, one raising in register."""
        write_unit(tmp_path, "tools", "good_one", tool_unit("good-one"))
        write_unit(tmp_path, "tools", "good_two", tool_unit("good-two"))
        write_unit(tmp_path, "tools", "bad_shape", "capability = {'kind': 'tool'}\n")
        write_unit(
            tmp_path,
            "tools",
            "explodes",
            """
            from coverity_mcp.modules.registry import CapabilityKind, CapabilityUnit

            def register(host):
                raise RuntimeError("cannot register")

            capability = CapabilityUnit(CapabilityKind.TOOL, "explodes", register)
            """,
        )

        with caplog.at_level(logging.INFO, logger="coverity_mcp.registry"):
            report = await auto_load_registry(recording_host, tmp_path, unit_package)

        assert report.loaded == 2
        assert report.failed == 2
        assert report.discovered == 4
        assert report.to_dict() == {"loaded": 2, "failed": 2}
        assert sorted(recording_host.registered) == ["good-one", "good-two"]

        messages = [r.getMessage() for r in caplog.records]
        assert "bad_shape: invalid module format, skipping" in messages
        assert any(m.startswith("explodes: failed to load - ") for m in messages)
        assert "Loaded 2 module(s), 2 failed" in messages

    @pytest.mark.asyncio
    async def test_import_error_counts_as_failure(self, tmp_path, unit_package, recording_host):
        write_unit(tmp_path, "tools", "good", tool_unit("good"))
        write_unit(tmp_path, "tools", "typo", "import module_that_does_not_exist\n")

        report = await auto_load_registry(recording_host, tmp_path, unit_package)

        assert (report.loaded, report.failed) == (1, 1)
        failed = [r for r in report.results if not r.success]
        assert failed[0].name == "typo"
        assert "module_that_does_not_exist" in failed[0].error

    @pytest.mark.asyncio
    async def test_empty_root(self, tmp_path, recording_host, caplog):
        with caplog.at_level(logging.INFO, logger="coverity_mcp.registry"):
            report = await auto_load_registry(recording_host, tmp_path)

        assert report.to_dict() == {"loaded": 0, "failed": 0}
        assert recording_host.registered == []
        assert "No modules found" in [r.getMessage() for r in caplog.records]

    @pytest.mark.asyncio
    async def test_async_register_is_awaited(self, tmp_path, unit_package, recording_host):
        write_unit(
            tmp_path,
            "prompts",
            "slow",
            """
            import asyncio

            from coverity_mcp.modules.registry import CapabilityKind, CapabilityUnit

            async def register(host):
                await asyncio.sleep(0)
                host.register_prompt("slow")

            capability = CapabilityUnit(CapabilityKind.PROMPT, "slow", register)
            """,
        )

        report = await auto_load_registry(recording_host, tmp_path, unit_package)

        assert report.loaded == 1
        assert recording_host.registered == ["slow"]

    @pytest.mark.asyncio
    async def test_kind_mismatch_still_registers(
        self, tmp_path, unit_package, recording_host, caplog
    ):
        write_unit(tmp_path, "resources", "misplaced", tool_unit("misplaced"))

        with caplog.at_level(logging.WARNING, logger="coverity_mcp.registry"):
            report = await auto_load_registry(recording_host, tmp_path, unit_package)

        assert report.loaded == 1
        assert recording_host.registered == ["misplaced"]
        assert any("resource directory" in r.getMessage() for r in caplog.records)
