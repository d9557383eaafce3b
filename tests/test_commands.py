from __future__ import annotations

from ghircbot.engine.commands import (
    AccountInfo,
    AddRepositories,
    ClearRepositories,
    CommentOnIssue,
    CreateAction,
    CreateIssue,
    FindIssues,
    Help,
    IgnoreNicks,
    Leave,
    NextIssues,
    RemoveRepositories,
    SetAlias,
    SetDelay,
    SetIssueState,
    SetMaxLines,
    Status,
    Suspend,
    parse_command,
)


def test_addressed_only_commands_need_addressing() -> None:
    assert parse_command("use w3c/aria", addressed=False) is None
    assert parse_command("use w3c/aria", addressed=True) == AddRepositories("w3c/aria")
    assert parse_command("status", addressed=False) is None
    assert parse_command("status?", addressed=True) == Status()
    assert parse_command("bye", addressed=True) == Leave()
    assert parse_command("help issue", addressed=True) == Help("issue")


def test_repository_commands() -> None:
    assert parse_command("repo: w3c/a, w3c/b", addressed=False) == AddRepositories("w3c/a, w3c/b")
    assert parse_command("repos+ aria", addressed=False) == AddRepositories("aria")
    assert parse_command("repo- aria", addressed=False) == RemoveRepositories("aria")
    assert parse_command("repo:", addressed=False) == ClearRepositories()
    assert parse_command("don't use aria", addressed=True) == RemoveRepositories("aria")
    assert parse_command("this is w3c/aria", addressed=True) == AddRepositories("w3c/aria")


def test_settings() -> None:
    assert parse_command("set delay to 5", addressed=True) == SetDelay(5)
    assert parse_command("delay=0", addressed=True) == SetDelay(0)
    assert parse_command("lines 20", addressed=True) == SetMaxLines(20)
    assert parse_command("off", addressed=True) == Suspend(issues=True, names=True, suspend=True)
    assert parse_command("on.", addressed=True) == Suspend(issues=True, names=True, suspend=False)
    assert parse_command("issues off", addressed=True) == Suspend(issues=True, names=False, suspend=True)
    assert parse_command("set names to yes", addressed=True) == Suspend(issues=False, names=True, suspend=False)


def test_issue_commands_work_unaddressed() -> None:
    assert parse_command("issue: Broken link", addressed=False) == CreateIssue("Broken link")
    assert parse_command("close #7", addressed=False) == SetIssueState("#7", "closed")
    assert parse_command("aria#7 closed", addressed=False) == SetIssueState("aria#7", "closed")
    assert parse_command("reopen w3c/aria#7", addressed=False) == SetIssueState("w3c/aria#7", "open")
    assert parse_command("comment #34: looks good", addressed=False) == CommentOnIssue("#34", "looks good")
    assert parse_command(
        "note https://github.com/w3c/aria/issues/3 merged", addressed=False
    ) == CommentOnIssue("https://github.com/w3c/aria/issues/3", "merged")


def test_action_forms() -> None:
    assert parse_command("action alice, bob: fix the thing - due 1 June", addressed=False) == CreateAction(
        "alice, bob", "fix the thing - due 1 June"
    )
    assert parse_command("action: carol to review the draft", addressed=False) == CreateAction(
        "carol", "review the draft"
    )


def test_people_commands() -> None:
    assert parse_command("who are you?", addressed=True) == AccountInfo()
    assert parse_command("ignore rrsagent zakim", addressed=True) == IgnoreNicks("rrsagent zakim", ignore=True)
    assert parse_command("do not ignore zakim", addressed=True) == IgnoreNicks("zakim", ignore=False)
    assert parse_command("alice = @alice-gh", addressed=True) == SetAlias("alice", "alice-gh")
    assert parse_command("bob is bobby", addressed=True) == SetAlias("bob", "bobby")


def test_find_and_next() -> None:
    assert parse_command("find closed actions by alice", addressed=True) == FindIssues(
        state="closed", kind="actions", creator="alice"
    )
    assert parse_command("list my issues", addressed=True) == FindIssues(assignee="my")
    assert parse_command("find all issues", addressed=True) == FindIssues(state="all")
    assert parse_command("find issues with label bug, ux from aria verbosely", addressed=True) == FindIssues(
        labels="bug, ux", repository="aria", full=True
    )
    assert parse_command("next", addressed=True) == NextIssues()
    assert parse_command("more issues", addressed=True) == NextIssues()
    assert parse_command("find more", addressed=True) == NextIssues()


def test_plain_chat_is_not_a_command() -> None:
    assert parse_command("let's look at #3 later", addressed=False) is None
    assert parse_command("hello there", addressed=True) is None
