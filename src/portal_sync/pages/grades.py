"""GradesPage - extracts assessment results from activities.asp.

Each h3/h4 heading names a subject; every table after it (until the next
heading) lists that subject's tasks. The first row of each table is a header.
The task is the first cell, the result the last.
"""

from portal_sync.dom import Node
from portal_sync.logging import get_logger
from portal_sync.models import Grade

log = get_logger(__name__)


def is_valid_task(task: str) -> bool:
    """Reject blanks, stray fragments, over-long text and "Year:" summary rows."""
    return 2 < len(task) < 100 and "Year:" not in task


class GradesPage:
    """Assessment results page at /activities.asp."""

    URL_PATH = "/activities.asp"

    SCAN = "h3, h4, table"

    def __init__(self, doc: Node) -> None:
        self.doc = doc

    def extract(self) -> list[Grade]:
        grades: list[Grade] = []
        subject = ""

        for element in self.doc.select(self.SCAN):
            if element.tag in ("h3", "h4"):
                subject = element.text
                continue
            if not subject:
                continue

            for row in element.select("tr")[1:]:
                cells = row.select("td")
                if len(cells) < 2:
                    continue
                task = cells[0].text
                if is_valid_task(task):
                    grades.append(
                        Grade(subject=subject, task=task, result=cells[-1].text)
                    )

        log.info("grades_extracted", grades=len(grades))
        return grades
