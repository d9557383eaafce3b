"""Help texts, one per topic, picked by the first topic pattern that matches."""

from __future__ import annotations

import re

from ghircbot import __version__

MANUAL = "https://w3c.github.io/GHURLBot/manual.html"

_TOPICS: tuple[tuple[str, str], ...] = (
    (
        r"\bcommands\b",
        'for help on commands, try "{me}, help x",\n'
        "where x is one of:\n"
        "#, @, use, discussing, discuss, using, take up, taking up,\n"
        "this will be, this is, repo, repos, repository, repositories,\n"
        "forget, drop, remove, don't use, do not use, issue, action, set,\n"
        "delay, status, on, off, issues, names, persons, teams, invite,\n"
        "list, search, find, get, look up, next, is, =, ignore,\n"
        "don't ignore, do not ignore, who are you, account, user, login,\n"
        'close, reopen, comment, note, bye.  Example: "{me}, help #".',
    ),
    (
        r"#",
        'when I see "xxx/yyy#nn" or "yyy#nn" or "#nn" (where nn is\n'
        "an issue number, yyy the name of a GitHub repository and xxx\n"
        "the name of a repository owner), I will print the URL to that\n"
        "issue and try to retrieve a summary.\n"
        'See also "{me}, help use" for setting the default repositories.\n'
        "Example: #1",
    ),
    (
        r"@",
        'when I see "@abc" (where abc is any name), I will print\n'
        "the URL of the user or team of that name on GitHub.\n"
        "Example: @w3c",
    ),
    (
        r"\b(use|discussing|discuss|using|take +up|taking +up|this +will +be|this +is)\b",
        'the command "{me}, {word} xxx/yyy" or "{me}, {word} yyy" adds\n'
        "repository xxx/yyy to my list of known repositories and makes it\n"
        "the default. If you create issues and action items, they will be\n"
        "created in this repository. If you omit xxx, it will be copied\n"
        "from the next repository in my list. You can give more than one\n"
        "repository, separated by commas or spaces. Aliases: use,\n"
        "discussing, discuss, using, take up, taking up, this will be,\n"
        'this is. See also "{me}, help repo". Example: {me}, {word} w3c/rdf-star',
    ),
    (
        r"\b(repo|repos|repository|repositories)\b",
        'the command "{word}: xxx/yyy" or "{word}: yyy" adds repository\n'
        "xxx/yyy to my list of known repositories and makes it the\n"
        "default. If you create issues and action items, they will be\n"
        "created in this repository. If you omit xxx, it will be copied\n"
        "from the next repository in my list. You can give more than one\n"
        'repository. Use commas or spaces to separate them. "{word}:" on its\n'
        "own empties the list. Aliases: repo, repos, repository,\n"
        'repositories. See also "{me}, help use".\n'
        "Example: {word}: w3c/rdf-star",
    ),
    (
        r"\b(forget|drop|remove|don't +use|do +not +use)\b",
        'the command "{me}, {word} xxx/yyy" or "{me}, {word} yyy"\n'
        "removes repository xxx/yyy from my list of known\n"
        "repositories. If you omit xxx, I remove the first in the list\n"
        "whose name is yyy. If the removed repository was the default,\n"
        "the second in the list will now be the default.\n"
        "Aliases: forget, drop, remove, don't use, do not use.",
    ),
    (
        r"\bissue\b",
        'the command "issue: ..." creates a new issue in the default\n'
        'repository on GitHub. See "{me}, help use" for how to set\n'
        "the default repository. Example: issue: Section 1.1 is wrong",
    ),
    (
        r"\baction\b",
        'the command "action: john to ..." or "action john: ..."\n'
        "creates an action item (in fact, an issue with an assignee and\n"
        "a due date) in the default repository on GitHub. You can\n"
        "separate multiple assignees with commas. If you end the\n"
        'text with "due" and a date, the due date will be that date.\n'
        "Otherwise the due date will be one week after today.\n"
        'The date can be specified in many ways, such as "Apr 2" and\n'
        '"next Thursday". See "{me}, help use" for how to set the\n'
        'default repository. See "{me}, help is" for defining aliases\n'
        "for usernames.\n"
        "Example: action john, kylie: solve #1 due in 2 weeks",
    ),
    (
        r"\bset\b",
        '"set" is used to set certain parameters, see\n'
        '"{me}, help delay", "{me}, help issues" and\n'
        '"{me}, help names".',
    ),
    (
        r"\bdelay\b",
        "normally, I will not look up an issue on GitHub if I\n"
        "already did it less than {delay} lines ago. The command\n"
        '"{me}, delay nn", or "{me}, delay = nn", or\n'
        '"{me}, set delay nn" or "{me}, set delay to nn"\n'
        "changes the number of lines from {delay} to nn.\n"
        "Example: {me}, delay 0",
    ),
    (
        r"\b(max)?lines\b",
        "when I list issues in full, I print at most {max_lines} at a\n"
        'time. The command "{me}, lines nn" or "{me}, set lines to nn"\n'
        "changes that number (at most 100).\n"
        "Example: {me}, lines 20",
    ),
    (
        r"\bstatus\b",
        'if you say "{me}, status" or "{me}, status?" I will print\n'
        "my current list of repositories, the current delay, whether I'm\n"
        "looking up issues, and which IRC users I'm ignoring.\n"
        "Example: {me}, status?",
    ),
    (
        r"\bon\b",
        'the command "{me}, on" tells me to start creating and\n'
        "looking up issues on GitHub again and to show URLs for\n"
        "GitHub user names, if I was previously told to stop doing so\n"
        'with "{me}, off". See also "{me}, help issues" and\n'
        '"{me}, help names".',
    ),
    (
        r"\boff\b",
        'the command "{me}, off" tells me to stop creating and\n'
        "looking up issues on GitHub and to stop showing URLs for\n"
        'GitHub user names. Use "{me}, on" to tell me to start again.\n'
        'See also "{me}, help issues" and "{me}, help names".',
    ),
    (
        r"\bissues\b",
        'the command "{me}, issues off" or "{me}, issues = off"\n'
        'or "{me}, set issues off" or "{me}, set issues to off"\n'
        "tells me to stop creating and looking up issues on GitHub.\n"
        'The same with "on" instead of "off" tells me to start again.\n'
        'See also "{me}, help on", "{me}, help off" and\n'
        '"{me}, help names".',
    ),
    (
        r"\b(names|persons|teams)\b",
        'the command "{me}, {word} off" or\n'
        '"{me}, {word} = off" or "{me}, set {word} off" or\n'
        '"{me}, set {word} to off" tells me to stop showing URLs for\n'
        'GitHub user names (such as "@w3c"). Replace "off"\n'
        'by "on" to tell me to start again. See also\n'
        '"{me}, help on", "{me}, help off" and "{me}, help issues".',
    ),
    (
        r"\binvite\b",
        'the command "/invite {me}" (note the "/") invites me\n'
        'to join this channel. See also "{me}, bye" for how to\n'
        "dismiss me from the channel.",
    ),
    (
        r"(\bis\b|=)",
        'the command "{me}, aaa {word} bbb" defines that aaa is\n'
        "an alias for the person with the username bbb on GitHub.\n"
        'You can add "@" in front of the GitHub username, if you wish.\n'
        "Typically this command serves to define an equivalence\n"
        "between an IRC nickname and a GitHub username, so that\n"
        'you can say "action aaa:...", where aaa is an IRC nick.\n'
        "Aliases: is, =. Example: {me}, denis {word} @deniak",
    ),
    (
        r"\b(don['’]t +ignore|do +not +ignore)\b",
        'the command "{me}, {word} aaa" tells me to stop\n'
        "ignoring messages on IRC from user aaa.\n"
        'See also "{me}, help ignore".\n'
        "Example: {me}, {word} agendabot",
    ),
    (
        r"\bignore\b",
        'the command "{me}, ignore aaa" tells me to ignore\n'
        "messages on IRC from user aaa.\n"
        "See also \"{me}, help don't ignore\".\n"
        "Example: {me}, ignore rrsagent",
    ),
    (
        r"\b(who +are +you|account|user|login)\b",
        'I will respond to the command "{me}, {word}"\n'
        'or "{me}, {word}?" with the username that I use on GitHub.\n'
        "Aliases: who are you, account, user, login.",
    ),
    (
        r"\bclose\b",
        'the command "close #nn" or "close yyy#nn" or\n'
        '"close xxx/yyy#nn" tells me to close GitHub issue number nn\n'
        "in repository xxx/yyy. If you omit xxx or xxx/yyy, I will find\n"
        "the repository in my list of repositories.\n"
        'See also "{me}, help use" for creating a list of repositories.\n'
        "Example: close #1",
    ),
    (
        r"\breopen\b",
        'the command "reopen #nn" or "reopen yyy#nn" or\n'
        '"reopen xxx/yyy#nn" tells me to reopen GitHub issue\n'
        "number nn in repository xxx/yyy. If you omit xxx or xxx/yyy,\n"
        "I will find the repository in my list of repositories.\n"
        'See also "{me}, help use" for creating a list of repositories.\n'
        "Example: reopen #1",
    ),
    (
        r"\bbye\b",
        'the command "{me}, bye" tells me to leave this channel.\n'
        'See also "{me}, help invite".',
    ),
    (
        r"\b(find|look +up|get|search|search +for|list)\b",
        'the command "{me}, {word}" lists at most 100 most recent open issues.\n'
        'It can optionally be followed by "open", "closed" or "all",\n'
        'optionally followed by "issues" or "actions", followed by zero\n'
        'or more conditions: "with labels label1, label2..." or\n'
        '"for name" or "by name" or "from repo". I will list the\n'
        "issues or actions that match those conditions.\n"
        'See also "{me}, next".\n'
        "Aliases: find, look up, get, search, search for, list.\n"
        "Example: {me}, list closed actions for pchampin from w3c/rdf-star",
    ),
    (
        r"\b(comment|note)\b",
        'the command "comment #nn: text" or\n'
        '"comment yyy#nn: text" or "comment xxx/yyy#nn: text" tells\n'
        "me to add some text to GitHub issue nn in repository xxx/yyy.\n"
        "The colon(:) is optional. If you omit xxx or xxx/yyy, I will\n"
        "find the repository in my list of repositories.\n"
        'See also "{me}, help use" for creating a list of repositories.\n'
        "Aliases: comment, note.\n"
        "Example: note #71: This is related to #70.",
    ),
    (
        r"\b(next|more)\b",
        'the command "{me}, {word}" lists the next group of issues\n'
        "if there are more than the previous find command could list.\n"
        'See also "{me}, help find".',
    ),
)

_COMPILED = tuple((re.compile(pattern, re.IGNORECASE), text) for pattern, text in _TOPICS)

_GENERAL = (
    "I am a bot to look up and create GitHub issues and\n"
    "action items. I am ghircbot " + __version__ + ".\n"
    'Try "{me}, help commands" or\n'
    "see " + MANUAL
)


def help_text(topic: str, me: str, delay: int = 15, max_lines: int = 10) -> list[str]:
    """Return the help for topic as separate chat lines."""
    for pattern, text in _COMPILED:
        match = pattern.search(topic)
        if match:
            word = match.group(1) if match.groups() and match.group(1) else match.group(0)
            return text.format(me=me, word=word, delay=delay, max_lines=max_lines).split("\n")
    return _GENERAL.format(me=me).split("\n")
