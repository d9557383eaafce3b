"""Suppress re-expanding the same reference within a channel's delay window."""

from __future__ import annotations

import logging

from ghircbot.core.models import Reference, UserRef
from ghircbot.core.state import ChannelState

logger = logging.getLogger(__name__)


def is_suspended(channel: ChannelState, reference: Reference) -> bool:
    if isinstance(reference, UserRef):
        return channel.names_suspended
    return channel.issues_suspended


def _forget_expired(channel: ChannelState) -> None:
    cutoff = channel.line_number - channel.delay
    for text in [text for text, line in channel.history.items() if line < cutoff]:
        del channel.history[text]


def should_expand(channel: ChannelState, reference: Reference, addressed: bool) -> bool:
    """Decide whether to expand reference now, recording it when we do.

    Being addressed directly overrides both the suspend flags and the delay.
    """
    _forget_expired(channel)
    if not addressed:
        if is_suspended(channel, reference):
            logger.debug("Skipping suspended reference", extra={"channel": channel.name, "reference": reference.text})
            return False
        previous = channel.history.get(reference.text, -channel.delay)
        if channel.line_number - previous <= channel.delay:
            logger.debug("Skipping recent reference", extra={"channel": channel.name, "reference": reference.text})
            return False
    channel.history[reference.text] = channel.line_number
    return True
