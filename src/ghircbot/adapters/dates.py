from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Sequence

import dateparser


class DateparserParser:
    """Free-form dates ("Apr 2", "in 2 weeks", "tomorrow") via dateparser."""

    def __init__(self, languages: Sequence[str] = ("en",)) -> None:
        self._logger = logging.getLogger(self.__class__.__name__)
        self._languages = list(languages)

    def parse(self, text: str, today: date) -> date | None:
        parsed = dateparser.parse(
            text,
            languages=self._languages,
            settings={
                "RELATIVE_BASE": datetime.combine(today, time(12, 0)),
                "RETURN_AS_TIMEZONE_AWARE": False,
            },
        )
        if parsed is None:
            self._logger.debug("Unparseable date", extra={"text": text})
            return None
        return parsed.date()
