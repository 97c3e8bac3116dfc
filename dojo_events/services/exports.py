import csv
import io
from dataclasses import dataclass
from xml.sax.saxutils import escape

from openpyxl import Workbook
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from dojo_events.models.events import Event
from dojo_events.models.participants import Participant

HEADERS = ["First name", "Last name", "Email", "Phone", "Status", "Registered at"]

EXPORT_FORMATS = {
    "pdf": ("pdf", "application/pdf"),
    "csv": ("csv", "text/csv; charset=utf-8"),
    "excel": ("xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
}


class UnsupportedFormatError(Exception):
    pass


@dataclass
class ExportedRoster:
    filename: str
    media_type: str
    content: bytes


def export_filename(event_id: str, extension: str) -> str:
    return f"event-{event_id}-participants.{extension}"


def export_roster(event: Event, participants: list[Participant], fmt: str) -> ExportedRoster:
    if fmt not in EXPORT_FORMATS:
        raise UnsupportedFormatError(f"Unsupported export format: {fmt}")
    extension, media_type = EXPORT_FORMATS[fmt]
    rows = [_row(p) for p in participants]
    render = {"pdf": _render_pdf, "csv": _render_csv, "excel": _render_excel}[fmt]
    return ExportedRoster(
        filename=export_filename(event.id, extension),
        media_type=media_type,
        content=render(event, rows),
    )


def _row(participant: Participant) -> list[str]:
    return [
        participant.first_name,
        participant.last_name or "",
        participant.email,
        participant.phone or "",
        participant.status,
        participant.created_at.strftime("%Y-%m-%d %H:%M") if participant.created_at else "",
    ]


def _render_csv(event: Event, rows: list[list[str]]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(HEADERS)
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def _render_excel(event: Event, rows: list[list[str]]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Participants"
    sheet.append(HEADERS)
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _render_pdf(event: Event, rows: list[list[str]]) -> bytes:
    buffer = io.BytesIO()
    styles = getSampleStyleSheet()
    doc = SimpleDocTemplate(buffer, pagesize=A4, title=f"{event.name} participants")
    table = Table([HEADERS] + rows, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
            ]
        )
    )
    story = [
        Paragraph(escape(event.name), styles["Title"]),
        Paragraph(f"{event.registered_count} / {event.capacity} registered", styles["Normal"]),
        Spacer(1, 12),
        table,
    ]
    doc.build(story)
    return buffer.getvalue()
