"""NoticesPage - extracts school notices from notices.asp.

Notices appear two ways on the same page:
  a.help[title]   tooltip link; text is the title, title attribute the body
  h4 + <sibling>  heading followed by a block holding the body HTML

Every notice is stamped with the date the page was requested for
(``notices.asp?date=15%20MAR%202025``; today when absent) and with today's date.
"""

from datetime import date

from portal_sync.dom import Node
from portal_sync.extract import format_notice_date, make_preview
from portal_sync.logging import get_logger
from portal_sync.models import Notice

log = get_logger(__name__)

# Shorter heading bodies are layout fragments, not notices
MIN_BODY_LENGTH = 11


class NoticesPage:
    """Daily notices page at /notices.asp."""

    URL_PATH = "/notices.asp"

    TOOLTIP_LINK = "a.help"
    HEADING = "h4"

    def __init__(self, doc: Node, notice_date: date | None = None) -> None:
        self.doc = doc
        self.notice_date = notice_date

    def _notice(self, title: str, content: str, content_html: str) -> Notice:
        stamp = format_notice_date(self.notice_date)
        return Notice(
            title=title,
            content=content,
            content_html=content_html,
            preview=make_preview(content),
            date=stamp,
            current_day=format_notice_date(None),
            dates=[stamp],
        )

    def extract(self) -> list[Notice]:
        notices: list[Notice] = []

        for link in self.doc.select(self.TOOLTIP_LINK):
            title = link.text
            content = link.attr("title") or ""
            if title and content:
                # Tooltip bodies are plain text; no richer HTML is available
                notices.append(self._notice(title, content, content))

        for heading in self.doc.select(self.HEADING):
            title = heading.text
            body = heading.next_sibling()
            if body is None or any(n.title == title for n in notices):
                continue
            content = body.text
            if title and len(content) >= MIN_BODY_LENGTH:
                notices.append(self._notice(title, content, body.inner_html))

        log.info(
            "notices_extracted",
            notice_date=format_notice_date(self.notice_date),
            notices=len(notices),
        )
        return notices
