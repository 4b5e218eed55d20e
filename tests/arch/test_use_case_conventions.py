# tests/arch/test_use_case_conventions.py
from __future__ import annotations

import importlib
import inspect
import re
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_ROOT = PROJECT_ROOT / "src" / "retail_sales"
USE_CASES_ROOT = SRC_ROOT / "application" / "use_cases"
TESTS_ROOT = PROJECT_ROOT / "tests"

GOOGLE_STYLE_RE = re.compile(r"\b(Args|Returns|Raises):", re.MULTILINE)


def _iter_use_case_modules() -> list[tuple[str, Path]]:
    modules: list[tuple[str, Path]] = []
    for path in sorted(USE_CASES_ROOT.rglob("*.py")):
        if path.name == "__init__.py":
            continue
        rel = path.relative_to(SRC_ROOT)
        modules.append(("retail_sales." + ".".join(rel.with_suffix("").parts), path))
    return modules


def _expected_test_path_for(module_path: Path) -> Path:
    # src/retail_sales/application/use_cases/sales/add_sale_item.py
    # -> tests/unit/application/use_cases/test_add_sale_item.py
    return TESTS_ROOT / "unit" / "application" / "use_cases" / f"test_{module_path.stem}.py"


def test_every_use_case_module_is_collected() -> None:
    names = {path.stem for _, path in _iter_use_case_modules()}
    assert {
        "create_sale",
        "add_sale_item",
        "update_sale_item_quantity",
        "remove_sale_item",
        "cancel_sale",
        "get_sale",
    } <= names


def test_use_cases_have_execute_and_tests_and_docstrings() -> None:
    violations: list[str] = []

    for module_name, path in _iter_use_case_modules():
        module = importlib.import_module(module_name)

        expected_test_path = _expected_test_path_for(path)
        if not expected_test_path.exists():
            violations.append(f"{module_name}: expected unit test file at {expected_test_path}.")

        use_cases = [
            obj
            for name, obj in inspect.getmembers(module, inspect.isclass)
            if name.endswith("UseCase") and obj.__module__ == module.__name__
        ]
        if not use_cases:
            violations.append(f"{module_name}: defines no *UseCase class.")

        for obj in use_cases:
            doc = inspect.getdoc(obj) or ""
            if not GOOGLE_STYLE_RE.search(doc):
                violations.append(
                    f"{module_name}.{obj.__name__} is missing a Google-style docstring "
                    "(expected Args/Returns/Raises)."
                )
            if not inspect.iscoroutinefunction(getattr(obj, "execute", None)):
                violations.append(f"{module_name}.{obj.__name__} must define async execute().")

    if violations:
        raise AssertionError("Use case convention violations:\n" + "\n".join(sorted(violations)))
