from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ahnenbaum.cli import app

runner = CliRunner()


def _invoke(db: Path, *args: str):
    return runner.invoke(app, [*args, "--db", str(db)], catch_exceptions=False)


def _add(db: Path, given: str, surname: str = "") -> str:
    result = _invoke(db, "person-add", given, surname)
    assert result.exit_code == 0, result.output
    return result.output.strip().splitlines()[-1]


@pytest.fixture
def db(tmp_path: Path) -> Path:
    return tmp_path / "cli.db"


def test_relate_prints_auto_partnership(db: Path) -> None:
    mother = _add(db, "Ingrid", "Fischer")
    father = _add(db, "Klaus", "Müller")
    child = _add(db, "Max", "Müller")

    first = _invoke(db, "relate", mother, child, "biological_parent")
    second = _invoke(db, "relate", father, child, "biological_parent")

    assert first.exit_code == 0
    assert "Auto-created" not in first.output
    assert second.exit_code == 0
    assert "Auto-created marriage" in second.output


def test_relate_conflict_exits_1(db: Path) -> None:
    a = _add(db, "Anna")
    b = _add(db, "Bernd")

    assert _invoke(db, "relate", a, b, "marriage").exit_code == 0
    duplicate = _invoke(db, "relate", b, a, "marriage")

    assert duplicate.exit_code == 1
    assert "CONFLICT" in duplicate.output


def test_relate_unknown_type_exits_1(db: Path) -> None:
    a = _add(db, "Anna")
    b = _add(db, "Bernd")

    result = _invoke(db, "relate", a, b, "neighbour")

    assert result.exit_code == 1
    assert "VALIDATION_ERROR" in result.output


def test_relationships_siblings_and_unrelate(db: Path) -> None:
    mother = _add(db, "Ingrid", "Fischer")
    me = _add(db, "Max")
    sister = _add(db, "Lena")
    _invoke(db, "relate", mother, me, "biological_parent")
    created = _invoke(db, "relate", mother, sister, "biological_parent")
    rel_id = created.output.split()[-1]

    listing = _invoke(db, "relationships")
    siblings = _invoke(db, "siblings", me)

    assert "showing 2 of 2" in listing.output
    assert "Lena" in siblings.output

    assert _invoke(db, "unrelate", rel_id).exit_code == 0
    assert "showing 1 of 1" in _invoke(db, "relationships").output
    assert "No siblings found" in _invoke(db, "siblings", me).output
    assert _invoke(db, "unrelate", rel_id).exit_code == 1


def test_invalid_sex_exits_1(db: Path) -> None:
    result = _invoke(db, "person-add", "Alex", "--sex", "robot")

    assert result.exit_code == 1


def test_extended_tree_and_layout(db: Path, tmp_path: Path) -> None:
    grandpa = _add(db, "Hans", "Müller")
    father = _add(db, "Klaus", "Müller")
    me = _add(db, "Max", "Müller")
    _invoke(db, "relate", grandpa, father, "biological_parent")
    _invoke(db, "relate", father, me, "biological_parent")

    extended = _invoke(db, "extended", me)
    tree = _invoke(db, "tree", me, "--generations", "3")
    out = tmp_path / "layout.json"
    layout = _invoke(db, "layout-family", "--output", str(out))

    assert extended.exit_code == 0
    assert "grandparent" in extended.output
    assert "Hans Müller" in extended.output
    assert tree.exit_code == 0
    assert "3 ancestors" in tree.output
    assert layout.exit_code == 0
    data = json.loads(out.read_text())
    assert len(data["nodes"]) == 3
    assert {c["type"] for c in data["connections"]} == {"parent-child"}


def test_missing_person_exits_1(db: Path) -> None:
    for command in ("siblings", "extended", "tree"):
        result = _invoke(db, command, "ghost")
        assert result.exit_code == 1, command
        assert "NOT_FOUND" in result.output


def test_defaults_come_from_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from ahnenbaum.config import CONFIG

    db = tmp_path / "from-config.db"
    config = dataclasses.replace(CONFIG, db_path=str(db), list_default_limit=1, tree_generations=2)
    monkeypatch.setattr("ahnenbaum.config.CONFIG", config)

    def run(*args: str):
        result = runner.invoke(app, list(args), catch_exceptions=False)
        assert result.exit_code == 0, result.output
        return result.output

    grandpa = run("person-add", "Hans").strip().splitlines()[-1]
    father = run("person-add", "Klaus").strip().splitlines()[-1]
    me = run("person-add", "Max").strip().splitlines()[-1]
    run("relate", grandpa, father, "biological_parent")
    run("relate", father, me, "biological_parent")

    assert db.exists()
    assert "showing 1 of 2" in run("relationships")
    assert "2 ancestors" in run("tree", me)
