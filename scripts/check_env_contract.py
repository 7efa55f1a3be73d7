#!/usr/bin/env python3
from __future__ import annotations

import ast
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SETTINGS_PATH = ROOT / "pubshare" / "settings.py"
ENV_EXAMPLE_PATH = ROOT / ".env.example"

SETTINGS_ENV_HELPERS = {"_env_bool", "_env_int", "_env_float", "_env_str"}
ALLOWED_ENV_EXAMPLE_EXTRAS = {
    "APP_HOST",
    "APP_PORT",
    "APP_RELOAD",
    "BACKEND_WAIT_TIMEOUT_SECONDS",
    "BACKEND_WAIT_INTERVAL_SECONDS",
}


def _call_name(node: ast.Call) -> str | None:
    func = node.func
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute) and isinstance(func.value, ast.Name):
        return f"{func.value.id}.{func.attr}"
    return None


def settings_env_names(settings_path: Path = SETTINGS_PATH) -> set[str]:
    tree = ast.parse(settings_path.read_text(encoding="utf-8"))
    names: set[str] = set()
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call) or not node.args:
            continue
        call_name = _call_name(node)
        if call_name != "os.getenv" and call_name not in SETTINGS_ENV_HELPERS:
            continue
        first = node.args[0]
        if isinstance(first, ast.Constant) and isinstance(first.value, str) and first.value:
            names.add(first.value)
    return names


def env_example_names(env_path: Path = ENV_EXAMPLE_PATH) -> tuple[set[str], set[str]]:
    names: set[str] = set()
    duplicates: set[str] = set()
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key = line.split("=", 1)[0].strip()
        if not key:
            continue
        if key in names:
            duplicates.add(key)
        names.add(key)
    return names, duplicates


def contract_problems(
    settings_path: Path = SETTINGS_PATH,
    env_path: Path = ENV_EXAMPLE_PATH,
) -> dict[str, list[str]]:
    declared = settings_env_names(settings_path)
    documented, duplicated = env_example_names(env_path)
    return {
        "missing": sorted(name for name in declared - documented if name not in ALLOWED_ENV_EXAMPLE_EXTRAS),
        "unknown": sorted(documented - declared - ALLOWED_ENV_EXAMPLE_EXTRAS),
        "duplicates": sorted(duplicated),
    }


def main() -> int:
    problems = contract_problems()
    if not any(problems.values()):
        print("Environment contract check passed.")
        return 0
    print("Environment contract check failed.")
    headings = {
        "missing": "Missing from .env.example (referenced in pubshare/settings.py):",
        "unknown": "Unknown keys in .env.example (not in pubshare/settings.py or allowlist):",
        "duplicates": "Duplicate keys in .env.example:",
    }
    for kind, names in problems.items():
        if not names:
            continue
        print(headings[kind])
        for name in names:
            print(f"- {name}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
