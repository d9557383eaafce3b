from __future__ import annotations

from ghircbot.core.models import ApiResponse, SearchQuery
from ghircbot.engine import jobs

REPO_URL = "https://github.com/w3c/aria"
ATTRIBUTION = jobs.Attribution(nick="alice", login="alice-gh", channel="#aria", server="irc.w3.org")


class _FakeClient:
    """Records calls and answers each method from a canned response."""

    def __init__(self, **responses: ApiResponse) -> None:
        self.responses = responses
        self.calls: list[tuple] = []

    def _answer(self, name: str, *args, **kwargs) -> ApiResponse:
        self.calls.append((name, args, kwargs))
        return self.responses.get(name, ApiResponse(status=500))

    def get_issue(self, owner, repo, number):
        return self._answer("get_issue", owner, repo, number)

    def get_discussion(self, owner, repo, number):
        return self._answer("get_discussion", owner, repo, number)

    def create_issue(self, owner, repo, title, body, assignees=(), labels=()):
        return self._answer("create_issue", owner, repo, title=title, body=body, assignees=assignees, labels=labels)

    def add_comment(self, owner, repo, number, body):
        return self._answer("add_comment", owner, repo, number, body)

    def set_issue_state(self, owner, repo, number, state):
        return self._answer("set_issue_state", owner, repo, number, state)

    def list_issues(self, owner, repo, params):
        return self._answer("list_issues", owner, repo, params)

    def get_authenticated_user(self):
        return self._answer("get_authenticated_user")


def _issue(**fields) -> dict:
    issue = {
        "number": 7,
        "title": "Fix the thing",
        "state": "open",
        "html_url": f"{REPO_URL}/issues/7",
        "user": {"login": "bob"},
        "labels": [],
        "assignees": [],
    }
    issue.update(fields)
    return issue


def test_format_issue_and_pull_request() -> None:
    issue = _issue(labels=[{"name": "bug"}, {"name": "a11y"}])
    pull = _issue(number=8, state="closed", pull_request={"url": "x"})

    assert jobs.format_issue(REPO_URL, issue) == f"{REPO_URL}/issues/7 -> Issue 7 Fix the thing (by bob) [bug] [a11y]"
    assert jobs.format_issue(REPO_URL, pull) == f"{REPO_URL}/issues/8 -> CLOSED Pull Request 8 Fix the thing (by bob)"


def test_format_action_recovers_due_date() -> None:
    action = _issue(
        labels=[{"name": "action"}],
        assignees=[{"login": "carol"}, {"login": "dan"}],
        body="Opened by alice via IRC channel #aria on irc.w3.org\n\nDue: 2026-10-26 (Monday 26 October)",
    )

    assert jobs.format_issue(REPO_URL, action) == (
        f"{REPO_URL}/issues/7 -> Action 7 Fix the thing (on carol, dan) due 2026-10-26"
    )


def test_due_date_in_older_body_styles() -> None:
    assert jobs.due_date_in("due 2 Apr 2026\n\nsomething") == "2 Apr 2026"
    assert jobs.due_date_in("Please do it. Due: 2026-04-02.") == "2026-04-02"
    assert jobs.due_date_in("no date here") is None
    assert jobs.due_date_in(None) is None


def test_lookup_issue_outcomes() -> None:
    found = _FakeClient(get_issue=ApiResponse(status=200, payload=_issue()))
    missing = _FakeClient(get_issue=ApiResponse(status=404))
    broken = _FakeClient(get_issue=ApiResponse(status=None, error="timeout"))

    assert jobs.lookup_issue(found, "#aria", REPO_URL, "w3c", "aria", 7) == [
        f"{REPO_URL}/issues/7 -> Issue 7 Fix the thing (by bob)"
    ]
    assert jobs.lookup_issue(missing, "#aria", REPO_URL, "w3c", "aria", 7) == [
        f"{REPO_URL}/issues/7 -> Issue 7 [not found]"
    ]
    assert jobs.lookup_issue(broken, "#aria", REPO_URL, "w3c", "aria", 7) == [f"{REPO_URL}/issues/7 -> #7"]
    assert found.calls == [("get_issue", ("w3c", "aria", 7), {})]


def test_lookup_discussion() -> None:
    client = _FakeClient(
        get_discussion=ApiResponse(
            status=200,
            payload={"number": 3, "title": "Naming", "closed": False, "author": {"login": "eve"}, "labels": ["q"]},
        )
    )

    assert jobs.lookup_discussion(client, "#aria", "w3c", "aria", 3) == [
        "https://github.com/w3c/aria/discussions/3 -> Discussion 3 Naming (by eve) [q]"
    ]


def test_create_issue_attributes_the_author() -> None:
    client = _FakeClient(create_issue=ApiResponse(status=201, payload=_issue(number=9, html_url=f"{REPO_URL}/issues/9")))

    lines = jobs.create_issue(client, "w3c/aria", "Fix the thing", ATTRIBUTION)

    assert lines == [f"Created -> issue #9 {REPO_URL}/issues/9 Fix the thing"]
    _, args, kwargs = client.calls[0]
    assert args == ("w3c", "aria")
    assert kwargs["body"] == "Opened by @alice-gh via IRC channel #aria on irc.w3.org"


def test_create_issue_without_write_access() -> None:
    client = _FakeClient(create_issue=ApiResponse(status=404))

    assert jobs.create_issue(client, "w3c/aria", "x", ATTRIBUTION) == [
        "Cannot create issue. Please, check that I have write access to w3c/aria."
    ]


def test_create_action_reports_unassigned_names() -> None:
    payload = _issue(labels=[{"name": "action"}], assignees=[{"login": "alice"}])
    client = _FakeClient(create_issue=ApiResponse(status=201, payload=payload))

    lines = jobs.create_action(client, "w3c/aria", "Fix", ["alice", "bob"], "Due: 2026-10-26 (Monday 26 October)", ATTRIBUTION)

    assert lines == [
        f"I created -> action #7 {REPO_URL}/issues/7",
        "but I could not assign it to bob",
        "They probably aren't collaborators on w3c/aria.",
    ]
    _, _, kwargs = client.calls[0]
    assert kwargs["labels"] == ["action"]
    assert kwargs["assignees"] == ["alice", "bob"]
    assert kwargs["body"].endswith("\n\nDue: 2026-10-26 (Monday 26 October)")


def test_create_action_without_label_permission() -> None:
    client = _FakeClient(create_issue=ApiResponse(status=201, payload=_issue(assignees=[{"login": "alice"}])))

    lines = jobs.create_action(client, "w3c/aria", "Fix", ["alice"], "Due: x", ATTRIBUTION)

    assert lines[0] == f"I created -> issue #7 {REPO_URL}/issues/7"
    assert lines[1] == 'but I could not add the "action" label.'


def test_create_action_validation_failure_names_the_user() -> None:
    client = _FakeClient(create_issue=ApiResponse(status=422))

    assert jobs.create_action(client, "w3c/aria", "Fix", ["zed"], "Due: x", ATTRIBUTION) == [
        "Cannot create action. Validation failed. Maybe zed is not a valid user for w3c/aria?"
    ]


def test_close_comments_first_then_patches() -> None:
    client = _FakeClient(
        add_comment=ApiResponse(status=201, payload={"html_url": "c"}),
        set_issue_state=ApiResponse(status=200, payload=_issue(state="closed")),
    )

    lines = jobs.change_issue_state(client, "w3c/aria", 7, "closed", ATTRIBUTION)

    assert lines == [f"Closed -> issue #7 {REPO_URL}/issues/7"]
    assert [call[0] for call in client.calls] == ["add_comment", "set_issue_state"]
    assert client.calls[0][1][3] == "Closed by @alice-gh via IRC channel #aria on irc.w3.org"


def test_close_stops_when_comment_fails() -> None:
    client = _FakeClient(add_comment=ApiResponse(status=404))

    assert jobs.change_issue_state(client, "w3c/aria", 7, "closed", ATTRIBUTION) == [
        "Cannot close issue #7. Issue not found."
    ]
    assert len(client.calls) == 1


def test_reopen_action_lists_assignees() -> None:
    payload = _issue(labels=[{"name": "action"}], assignees=[{"login": "carol"}], body="Due: 2026-10-26")
    client = _FakeClient(
        add_comment=ApiResponse(status=201, payload={"html_url": "c"}),
        set_issue_state=ApiResponse(status=200, payload=payload),
    )

    assert jobs.change_issue_state(client, "w3c/aria", 7, "open", ATTRIBUTION) == [
        f"Reopened -> action #7 {REPO_URL}/issues/7 Fix the thing (on carol) due 2026-10-26"
    ]


def test_comment_and_account() -> None:
    client = _FakeClient(
        add_comment=ApiResponse(status=201, payload={"html_url": f"{REPO_URL}/issues/7#issuecomment-1"}),
        get_authenticated_user=ApiResponse(status=401),
    )

    assert jobs.comment_on_issue(client, "w3c/aria", 7, "looks good", ATTRIBUTION) == [
        f"Added -> comment {REPO_URL}/issues/7#issuecomment-1"
    ]
    assert client.calls[0][1][3] == "Comment by @alice-gh via IRC channel #aria on irc.w3.org\n\nlooks good"
    assert jobs.account_info(client, "#aria") == [
        "Cannot read account. I have insufficient (or expired) authorization."
    ]


def test_find_issues_brief_full_and_empty() -> None:
    listing = [_issue(number=1), _issue(number=2)]
    client = _FakeClient(list_issues=ApiResponse(status=200, payload=listing))
    query = SearchQuery(repository="w3c/aria", params={"state": "open", "per_page": 100}, page=2)

    assert jobs.find_issues(client, "#aria", query) == ["Found issues in w3c/aria: #1, #2"]
    assert client.calls[0][1][2] == {"state": "open", "per_page": 100, "page": 2}

    full = SearchQuery(repository="w3c/aria", full=True)
    assert jobs.find_issues(client, "#aria", full)[1] == f"{REPO_URL}/issues/2 -> Issue 2 Fix the thing (by bob)"

    empty = _FakeClient(list_issues=ApiResponse(status=200, payload=[]))
    actions = SearchQuery(repository="w3c/aria", kind="actions")
    assert jobs.find_issues(empty, "#aria", actions) == ["Found no actions in w3c/aria"]


def test_failures_are_described() -> None:
    assert jobs.describe_failure("search", ApiResponse(status=None)) == (
        "Cannot search. GitHub did not respond. Please, try again later."
    )
    assert jobs.describe_failure("search", ApiResponse(status=403, rate_limited=True)) == (
        "Cannot search. GitHub's rate limit was reached. Please, try again later."
    )
    assert jobs.describe_failure("search", ApiResponse(status=403)) == "Cannot search. Forbidden."
    assert jobs.describe_failure("search", ApiResponse(status=500)) == "Cannot search. Error 500"
