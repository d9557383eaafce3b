from __future__ import annotations

from ghircbot.adapters.storage.rejoin import RejoinFile


def test_join_and_part_are_remembered(tmp_path) -> None:
    path = tmp_path / "rejoin"
    path.write_text("#aria\n\n#css\n#aria\n", encoding="utf-8")

    rejoin = RejoinFile(str(path))
    assert rejoin.load() == ["#aria", "#css"]

    rejoin.add("#tag")
    rejoin.add("#tag")
    rejoin.remove("#aria")
    rejoin.close()

    assert path.read_text(encoding="utf-8") == "#css\n#tag\n"


def test_missing_file_is_created_empty(tmp_path) -> None:
    rejoin = RejoinFile(str(tmp_path / "rejoin"))
    try:
        assert rejoin.load() == []
        assert rejoin.channels == []
    finally:
        rejoin.close()
