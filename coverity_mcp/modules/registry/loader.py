"""
Capability auto-loader.

One-shot startup sequence: discover unit files, then load, validate and
register each of them concurrently. Every attempt settles on its own; a unit
that fails to import, has the wrong shape, or raises inside register() is
logged and counted without affecting its siblings.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from .discovery import (
    DEFAULT_PACKAGE,
    find_module_files,
    get_module_name,
    get_module_type,
    load_module,
)
from .types import is_capability_unit, kind_label

logger = logging.getLogger("coverity_mcp.registry")


@dataclass(frozen=True)
class ModuleResult:
    """Outcome of loading one unit file."""

    name: str
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class LoadReport:
    """Aggregate result of an auto-load pass."""

    loaded: int = 0
    failed: int = 0
    results: List[ModuleResult] = field(default_factory=list)

    @property
    def discovered(self) -> int:
        return self.loaded + self.failed

    def to_dict(self) -> dict:
        return {"loaded": self.loaded, "failed": self.failed}


async def process_module(host: Any, file_path: Path, package: str = DEFAULT_PACKAGE) -> ModuleResult:
    """Load, validate and register a single unit file."""
    name = get_module_name(file_path)
    try:
        unit = await asyncio.to_thread(load_module, file_path, package)
        if not is_capability_unit(unit):
            logger.error(f"{name}: invalid module format, skipping")
            return ModuleResult(name, False, "invalid module format")

        expected = get_module_type(file_path)
        if expected is not None and expected != unit.kind:
            logger.warning(f"{name}: {kind_label(unit.kind)} unit found in the {expected.value} directory")

        result = unit.register(host)
        if inspect.isawaitable(result):
            await result

        logger.debug(f"{name}: registered {kind_label(unit.kind)} {unit.name!r}")
        return ModuleResult(name, True)
    except Exception as e:
        logger.error(f"{name}: failed to load - {e!r}")
        return ModuleResult(name, False, str(e) or type(e).__name__)


async def auto_load_registry(
    host: Any,
    root: Optional[Path] = None,
    package: str = DEFAULT_PACKAGE,
) -> LoadReport:
    """
    Discover and register every capability unit under ``root``.

    Args:
        host: Capability server the units register against
        root: Directory containing tools/, resources/, prompts/ (bundled units by default)
        package: Dotted prefix for the loaded module names

    Returns:
        LoadReport with loaded/failed counts
    """
    files = find_module_files(root)

    if not files:
        logger.info("No modules found")
        return LoadReport()

    outcomes = await asyncio.gather(
        *(process_module(host, f, package) for f in files),
        return_exceptions=True,
    )

    results: List[ModuleResult] = []
    for path, outcome in zip(files, outcomes):
        if isinstance(outcome, BaseException):
            results.append(ModuleResult(get_module_name(path), False, str(outcome)))
        else:
            results.append(outcome)

    loaded = sum(1 for r in results if r.success)
    failed = len(results) - loaded
    logger.info(f"Loaded {loaded} module(s), {failed} failed")

    return LoadReport(loaded=loaded, failed=failed, results=results)
