# tests/arch/test_layering.py
# Copyright (c) Retail Sales.
# SPDX-License-Identifier: MIT
"""Clean Architecture layering guardrail using the grimp import graph.

Policy for `retail_sales`:

    domain         → domain
    application    → domain, application
    adapters       → domain, application, adapters, infrastructure
    infrastructure → domain, application, adapters, infrastructure

`config` and `dependencies` sit outside the matrix: they may import any
layer, but only adapters and the composition root may import them back.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

import grimp
import pytest
from grimp import ImportGraph

ROOT_PACKAGE: Final[str] = "retail_sales"

LAYERS: Final[frozenset[str]] = frozenset({"domain", "application", "adapters", "infrastructure"})

ALLOWED_DEPENDENCIES: Mapping[str, set[str]] = {
    "domain": {"domain"},
    "application": {"domain", "application"},
    "adapters": {"domain", "application", "adapters", "infrastructure"},
    "infrastructure": {"domain", "application", "adapters", "infrastructure"},
}

# Packages outside the matrix and the layers allowed to import them.
OUTER_PACKAGES: Mapping[str, set[str]] = {
    "config": {"adapters", "config", "dependencies"},
    "dependencies": {"dependencies"},
}

# Third-party frameworks the two inner layers must never touch.
INNER_FORBIDDEN_EXTERNALS: Final[tuple[str, ...]] = (
    "prometheus_client",
    "pydantic_settings",
)


@pytest.fixture(scope="module")
def graph() -> ImportGraph:
    """Import graph of the root package, external packages included."""
    return grimp.build_graph(ROOT_PACKAGE, include_external_packages=True)


def _top_package(module_name: str) -> str | None:
    """Return the first component after the root package, if any."""
    if not module_name.startswith(f"{ROOT_PACKAGE}."):
        return None
    return module_name[len(ROOT_PACKAGE) + 1 :].split(".", 1)[0]


def _internal_modules(graph: ImportGraph) -> list[str]:
    return sorted(m for m in graph.modules if m.startswith(f"{ROOT_PACKAGE}."))


def test_layers_only_import_inward(graph: ImportGraph) -> None:
    violations: set[str] = set()

    for importer in _internal_modules(graph):
        importer_top = _top_package(importer)
        if importer_top not in LAYERS:
            continue
        allowed = ALLOWED_DEPENDENCIES[importer_top]

        for imported in graph.find_modules_directly_imported_by(importer):
            imported_top = _top_package(imported)
            if imported_top in LAYERS and imported_top not in allowed:
                violations.add(f"{importer} ({importer_top}) -> {imported} ({imported_top})")

    if violations:
        raise AssertionError("Layering violations detected:\n" + "\n".join(sorted(violations)))


def test_outer_packages_are_not_imported_by_inner_layers(graph: ImportGraph) -> None:
    violations: set[str] = set()

    for importer in _internal_modules(graph):
        importer_top = _top_package(importer)
        for imported in graph.find_modules_directly_imported_by(importer):
            imported_top = _top_package(imported)
            if imported_top not in OUTER_PACKAGES:
                continue
            if importer_top not in OUTER_PACKAGES[imported_top]:
                violations.add(f"{importer} -> {imported}")

    if violations:
        raise AssertionError(
            "Outer packages imported from inner layers:\n" + "\n".join(sorted(violations))
        )


def test_inner_layers_do_not_import_infrastructure_libraries(graph: ImportGraph) -> None:
    violations: set[str] = set()

    for importer in _internal_modules(graph):
        if _top_package(importer) not in {"domain", "application"}:
            continue
        for imported in graph.find_modules_directly_imported_by(importer):
            if imported.split(".", 1)[0] in INNER_FORBIDDEN_EXTERNALS:
                violations.add(f"{importer} -> {imported}")

    if violations:
        raise AssertionError(
            "Inner layers import infrastructure libraries:\n" + "\n".join(sorted(violations))
        )
