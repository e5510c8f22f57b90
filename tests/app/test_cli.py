from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from longbox.ui import cli

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from longbox.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork

BUNDLE = [
    {
        "source": "comicvine",
        "fetchedAt": "2024-05-01T12:00:00Z",
        "sourceId": 12345,
        "data": {
            "name": "Batman #1: Court of Owls",
            "issue_number": "1",
            "volumeInformation": {"name": "Batman", "publisher": {"name": "DC Comics"}},
        },
    },
    {
        "source": "comicinfo_xml",
        "fetchedAt": "2024-05-01T12:00:00Z",
        "data": {"Title": "Batman #1", "Series": "Batman", "PageCount": 40},
    },
]


@pytest.fixture
def started(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
) -> Callable[[], SqlAlchemyCatalogUnitOfWork]:
    return sqlite_unit_of_work


def _write(tmp_path: Path, name: str, payload: object) -> str:
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def _run(capsys: pytest.CaptureFixture[str], *argv: str) -> object:
    cli.main(list(argv))
    return json.loads(capsys.readouterr().out)


@pytest.mark.usefixtures("started")
def test_import_override_and_conflicts(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    imported = _run(capsys, "import", _write(tmp_path, "bundle.json", BUNDLE))
    assert isinstance(imported, dict)
    item_id = imported["id"]
    assert imported["canonicalResolved"] is True
    assert imported["record"]["title"]["value"] == "Batman #1: Court of Owls"

    pinned = _run(capsys, "override", "set", item_id, "title", "Custom Title")
    assert isinstance(pinned, dict)
    assert pinned["title"]["userOverride"] is True
    assert pinned["fieldStates"]["title"] == "user_overridden"

    conflicts = _run(capsys, "conflicts", item_id, "--field", "title")
    assert isinstance(conflicts, list)
    assert conflicts[0]["resolutionReason"] == "User override"

    cleared = _run(capsys, "override", "clear", item_id, "title")
    assert isinstance(cleared, dict)
    assert cleared["title"]["value"] == "Batman #1: Court of Owls"


@pytest.mark.usefixtures("started")
def test_policy_set_then_preview(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    imported = _run(capsys, "import", _write(tmp_path, "bundle.json", BUNDLE))
    assert isinstance(imported, dict)
    policy_path = _write(
        tmp_path,
        "policy.json",
        {"conflictResolution": "priority", "fieldPreferences": {"title": "comicinfo_xml"}},
    )

    cli.main(["policy", "set", policy_path])
    capsys.readouterr()
    shown = _run(capsys, "policy", "show")
    preview = _run(capsys, "preview", imported["id"])

    assert isinstance(shown, dict)
    assert shown["conflictResolution"] == "priority"
    assert isinstance(preview, dict)
    assert preview["title"]["value"] == "Batman #1"


@pytest.mark.usefixtures("started")
def test_invalid_item_id_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["resolve", "not-a-uuid"])

    assert exc.value.code == 2


@pytest.mark.usefixtures("started")
def test_unknown_item_exits_with_failure() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["resolve", "00000000-0000-0000-0000-000000000000"])

    assert exc.value.code == 1


@pytest.mark.usefixtures("started")
def test_show_and_list_read_stored_items(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    imported = _run(capsys, "import", _write(tmp_path, "bundle.json", BUNDLE))
    assert isinstance(imported, dict)

    shown = _run(capsys, "show", imported["id"])
    listed = _run(capsys, "list", "--search", "owls", "--publisher", "DC")
    missed = _run(capsys, "list", "--series", "Saga")

    assert isinstance(shown, dict)
    assert shown["record"] == imported["record"]
    assert isinstance(listed, dict)
    assert [item["id"] for item in listed["items"]] == [imported["id"]]
    assert listed["totalCount"] == 1
    assert listed["pageInfo"] == {
        "hasNextPage": False,
        "hasPreviousPage": False,
        "currentPage": 1,
        "totalPages": 1,
    }
    assert isinstance(missed, dict)
    assert missed["items"] == []


@pytest.mark.usefixtures("started")
def test_list_rejects_bad_paging() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["list", "--page", "0"])

    assert exc.value.code == 2
