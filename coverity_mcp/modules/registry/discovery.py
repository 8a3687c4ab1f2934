"""Filesystem discovery and dynamic loading of capability modules."""

import importlib.util
import sys
from pathlib import Path
from typing import Any, List, Optional

from .types import CapabilityKind

# Category directory -> kind of unit it holds
CATEGORY_DIRS = {
    "tools": CapabilityKind.TOOL,
    "resources": CapabilityKind.RESOURCE,
    "prompts": CapabilityKind.PROMPT,
}

DEFAULT_PACKAGE = "coverity_mcp.capabilities"
EXPORT_NAME = "capability"


def get_root_dir() -> Path:
    """Directory holding the bundled tools/, resources/ and prompts/."""
    return Path(__file__).resolve().parents[2] / "capabilities"


def get_module_type(file_path: Path) -> Optional[CapabilityKind]:
    for part in Path(file_path).parts:
        if part in CATEGORY_DIRS:
            return CATEGORY_DIRS[part]
    return None


def get_module_name(file_path: Path) -> str:
    return Path(file_path).stem


def find_module_files(root: Optional[Path] = None) -> List[Path]:
    """
    List candidate unit files under the category directories of ``root``.

    Only the directory listing is consulted; files are not opened. Private
    modules (leading underscore, including __init__.py) are skipped.
    """
    root = Path(root) if root is not None else get_root_dir()
    files: List[Path] = []
    for category in CATEGORY_DIRS:
        directory = root / category
        if not directory.is_dir():
            continue
        files.extend(
            path
            for path in sorted(directory.glob("*.py"))
            if path.is_file() and not path.name.startswith("_")
        )
    return files


def qualified_name(file_path: Path, package: str = DEFAULT_PACKAGE) -> str:
    """Dotted module name for a unit file: <package>.<category>.<stem>."""
    path = Path(file_path)
    return f"{package}.{path.parent.name}.{path.stem}"


def load_module(file_path: Path, package: str = DEFAULT_PACKAGE) -> Any:
    """
    Import a unit file and return its exported descriptor.

    A module already present in sys.modules is reused. A module that fails
    while executing is removed again so a later attempt starts clean.

    Returns:
        The module's ``capability`` attribute, or None if it has none
    """
    name = qualified_name(file_path, package)
    module = sys.modules.get(name)

    if module is None:
        spec = importlib.util.spec_from_file_location(name, str(file_path))
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load module from {file_path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(name, None)
            raise

    return getattr(module, EXPORT_NAME, None)
