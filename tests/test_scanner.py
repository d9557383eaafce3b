from __future__ import annotations

from ghircbot.core.models import FullIssueUrl, IssueRef, UserRef
from ghircbot.engine.scanner import is_scribe_edit, scan_references


def test_explicit_owner_and_repo_are_captured() -> None:
    refs = list(scan_references("Let's talk about w3c/aria#15"))

    assert len(refs) == 1
    ref = refs[0]
    assert isinstance(ref, IssueRef)
    assert (ref.owner, ref.repo, ref.number) == ("w3c", "aria", 15)
    assert ref.prefix == "w3c/aria"


def test_bare_and_repo_only_references() -> None:
    refs = list(scan_references("see #12 and rdf-star#3."))

    assert [r.text for r in refs] == ["#12", "rdf-star#3"]
    assert refs[0].prefix == ""
    assert refs[1].owner is None
    assert refs[1].repo == "rdf-star"


def test_nothing_inside_code_spans_is_reported() -> None:
    refs = list(scan_references("`#12` and ``w3c/x#4 @bob`` but #13"))

    assert [r.text for r in refs] == ["#13"]


def test_full_urls_keep_their_kind() -> None:
    refs = list(
        scan_references(
            "https://github.com/w3c/csswg-drafts/pull/42 and "
            "https://github.com/w3c/aria/discussions/7"
        )
    )

    assert all(isinstance(r, FullIssueUrl) for r in refs)
    assert [(r.repo, r.kind, r.number) for r in refs] == [("csswg-drafts", "pull", 42), ("aria", "discussions", 7)]
    assert refs[0].repository == "https://github.com/w3c/csswg-drafts"


def test_user_mentions_but_not_email_addresses() -> None:
    refs = list(scan_references("ask @w3c-team or mail foo@example.org"))

    assert len(refs) == 1
    assert isinstance(refs[0], UserRef)
    assert refs[0].name == "w3c-team"


def test_anchors_in_urls_are_not_issues() -> None:
    assert list(scan_references("http://example.com/#3")) == []


def test_scribe_edits_are_skipped() -> None:
    assert is_scribe_edit("s/#3/#4/")
    assert is_scribe_edit("s|old|new|g")
    assert not is_scribe_edit("see #3")
    assert list(scan_references("s/#3/#4/")) == []


def test_references_glued_to_other_text_are_ignored() -> None:
    assert list(scan_references("fool#3x")) == []
    assert list(scan_references("a#b#3")) == []
    assert list(scan_references("x.#4")) == []


def test_repository_prefix_cannot_end_with_a_dot() -> None:
    refs = list(scan_references("see w3c/aria.js#2 and w3c/x.#4"))

    assert [r.text for r in refs] == ["w3c/aria.js#2"]
    assert refs[0].repo == "aria.js"


def test_insert_edits_are_skipped() -> None:
    assert is_scribe_edit("i/anchor/text #3/")
    assert list(scan_references("i/anchor/text #3/")) == []
