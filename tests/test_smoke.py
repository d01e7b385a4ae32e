from __future__ import annotations

import importlib

import pytest


@pytest.mark.unit
def test_import_package() -> None:
    importlib.import_module("syrinx")


@pytest.mark.unit
def test_import_cli_main() -> None:
    importlib.import_module("syrinx.cli.main")


@pytest.mark.unit
def test_import_worker() -> None:
    module = importlib.import_module("syrinx.worker")
    assert hasattr(module, "ManifoldWorker")


@pytest.mark.unit
def test_declared_readme_exists() -> None:
    import tomllib

    from syrinx.global_config import PROJECT_ROOT

    meta = tomllib.loads((PROJECT_ROOT / "pyproject.toml").read_text(encoding="utf-8"))
    readme = PROJECT_ROOT / meta["project"]["readme"]
    assert readme.name == "README.md"
    assert readme.read_text(encoding="utf-8").startswith("# syrinx")
