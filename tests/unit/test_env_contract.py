from pathlib import Path

from scripts.check_env_contract import contract_problems, settings_env_names


def test_repository_env_example_matches_settings() -> None:
    assert contract_problems() == {"missing": [], "unknown": [], "duplicates": []}


def test_contract_reports_missing_unknown_and_duplicate_keys(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.py"
    settings_path.write_text(
        'import os\nA = _env_str("POCKETBASE_URL", "")\nB = os.getenv("LOG_LEVEL")\n',
        encoding="utf-8",
    )
    env_path = tmp_path / ".env.example"
    env_path.write_text("# comment\nPOCKETBASE_URL=x\nPOCKETBASE_URL=y\nSTRAY_KEY=1\nAPP_PORT=8000\n", encoding="utf-8")

    assert settings_env_names(settings_path) == {"POCKETBASE_URL", "LOG_LEVEL"}
    assert contract_problems(settings_path, env_path) == {
        "missing": ["LOG_LEVEL"],
        "unknown": ["STRAY_KEY"],
        "duplicates": ["POCKETBASE_URL"],
    }
