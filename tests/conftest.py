"""
Shared test fixtures.
"""

from pathlib import Path

import pytest

from cache_relocator.adapters.mock import FakeCommandRunner, MemoryEnvStore
from cache_relocator.core.models.descriptor import PackageManagerDescriptor


@pytest.fixture
def env_store() -> MemoryEnvStore:
    return MemoryEnvStore()


@pytest.fixture
def runner() -> FakeCommandRunner:
    return FakeCommandRunner()


@pytest.fixture
def target_root(tmp_path: Path) -> Path:
    root = tmp_path / "cache"
    return root


@pytest.fixture
def make_descriptor(target_root: Path):
    """Factory for descriptors rooted in the test's temp directory."""

    def _make(name: str = "npm", **overrides) -> PackageManagerDescriptor:
        data = {
            "name": name,
            "env_var": f"{name.upper()}_CACHE",
            "target_path": str(target_root / name),
            "detection_commands": (name,),
        }
        data.update(overrides)
        return PackageManagerDescriptor(**data)

    return _make


def write_tree(root: Path, files: dict[str, bytes | str]) -> Path:
    """Create *files* (relative path → content) under *root*."""
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode()
        path.write_bytes(content)
    return root


@pytest.fixture
def make_tree():
    return write_tree
