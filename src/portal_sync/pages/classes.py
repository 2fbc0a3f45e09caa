"""ClassesPage - extracts the enrolled-classes table from classes.asp.

The page is served with and without ``?uid=N`` and the two variants order
and name their columns differently (Course/Subject, Class, Teacher, Lessons,
Quick Merits, Rolls Marked, Absences, Room/Location). Each candidate table is
read in two steps: resolve a column schema from its header row, then apply
that schema to every data row.
"""

from portal_sync.dom import Node
from portal_sync.extract import parse_int
from portal_sync.logging import get_logger
from portal_sync.models import ClassInfo

log = get_logger(__name__)

# (slot, header substrings that claim the column, substrings that veto it).
# A header cell goes to the first rule it satisfies; later cells win ties.
COLUMN_RULES: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("course", ("course", "subject"), ()),
    ("class_code", ("class",), ("classes",)),
    ("teacher", ("teacher",), ()),
    ("lessons", ("lesson",), ()),
    ("quick_merits", ("merit",), ()),
    ("rolls_marked", ("roll",), ()),
    ("absences", ("absence",), ()),
    ("room", ("room", "location"), ()),
)

TEXT_SLOTS = ("class_code", "teacher", "room")
COUNT_SLOTS = ("lessons", "quick_merits", "rolls_marked", "absences")


def is_classes_header(header_text: str) -> bool:
    text = header_text.lower()
    return ("course" in text or "subject" in text) and (
        "class" in text or "teacher" in text
    )


def resolve_schema(header_cells: list[Node]) -> dict[str, int]:
    """Map slot name -> column index from the header row's cell texts."""
    schema: dict[str, int] = {}
    for idx, cell in enumerate(header_cells):
        text = cell.text.lower()
        for slot, claims, vetoes in COLUMN_RULES:
            if any(c in text for c in claims) and not any(v in text for v in vetoes):
                schema[slot] = idx
                break
    return schema


def _cell_text(cells: list[Node], idx: int | None) -> str:
    if idx is None or idx >= len(cells):
        return ""
    return cells[idx].text


def extract_row(schema: dict[str, int], cells: list[Node]) -> ClassInfo | None:
    """Apply a resolved schema to one data row."""
    course_idx = schema["course"]
    if len(cells) <= course_idx:
        return None

    course = cells[course_idx].text
    if len(course) <= 2 or "Total:" in course:
        return None

    fields = {slot: _cell_text(cells, schema.get(slot)) for slot in TEXT_SLOTS}
    fields["class_code"] = fields["class_code"] or course
    counts = {slot: parse_int(_cell_text(cells, schema.get(slot))) for slot in COUNT_SLOTS}
    return ClassInfo(course=course, **fields, **counts)


class ClassesPage:
    """Classes page at /classes.asp."""

    URL_PATH = "/classes.asp"

    def __init__(self, doc: Node) -> None:
        self.doc = doc

    def extract(self) -> list[ClassInfo]:
        classes: list[ClassInfo] = []

        for table in self.doc.select("table"):
            rows = table.select("tr")
            if len(rows) < 2 or not is_classes_header(rows[0].text):
                continue

            schema = resolve_schema(rows[0].select("th, td"))
            if "course" not in schema:
                log.debug("classes_table_without_course", columns=len(schema))
                continue

            for row in rows[1:]:
                info = extract_row(schema, row.select("td"))
                if info is not None:
                    classes.append(info)

        log.info("classes_extracted", classes=len(classes))
        return classes
