"""Tests for booking plan file resolution."""

from core.locate import (
    from_argument,
    from_environment,
    from_user_profile,
    from_working_directory,
    resolve_input_file,
)


def test_first_existing_candidate_wins(tmp_path):
    first = tmp_path / "a.xlsx"
    second = tmp_path / "b.xlsx"
    second.write_bytes(b"")
    first.write_bytes(b"")

    strategies = [from_argument(None), from_argument(first), from_argument(second)]
    assert resolve_input_file(strategies) == first


def test_missing_candidates_are_skipped(tmp_path):
    existing = tmp_path / "plan.xlsx"
    existing.write_bytes(b"")

    strategies = [
        from_argument(tmp_path / "missing.xlsx"),
        from_environment(""),
        from_user_profile(existing),
    ]
    assert resolve_input_file(strategies) == existing


def test_directories_do_not_count(tmp_path):
    assert resolve_input_file([from_argument(tmp_path)]) is None


def test_environment_value_expands_user(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    plan = tmp_path / "plan.xlsx"
    plan.write_bytes(b"")

    assert resolve_input_file([from_environment("~/plan.xlsx")]) == plan


def test_working_directory_default_name(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "Belegungsplan.xlsx").write_bytes(b"")

    found = resolve_input_file([from_working_directory("Belegungsplan.xlsx")])
    assert found == tmp_path / "Belegungsplan.xlsx"


def test_nothing_found():
    assert resolve_input_file([]) is None
