"""
Observation report PDF generation.

Renders the printable observation report using reportlab.
"""

import io
from datetime import date
from uuid import UUID
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy.orm import Session

from classroom_observations.core.exceptions import InvalidStatusTransition
from classroom_observations.db.enums import ObservationStatus
from classroom_observations.db.models import Observation
from classroom_observations.schemas.auth import Principal
from classroom_observations.services import observation_service
from classroom_observations.services.report_service import (
    ReportAssembler,
    ReportText,
    assemble_report,
    parse_report_notes,
)
from classroom_observations.utils.clock import now_local

PRINTABLE_STATUSES = {ObservationStatus.COMPLETED.value, ObservationStatus.REVIEWED.value}

HEADER_COLOR = colors.HexColor("#334155")
GRID_COLOR = colors.HexColor("#cbd5e1")
ALT_ROW_COLOR = colors.HexColor("#f1f5f9")


def _text(value) -> str:
    """Escape free text for reportlab's paragraph markup."""
    if value is None or value == "":
        return "-"
    return escape(str(value))


def _paragraphs(text: str, style: ParagraphStyle) -> list:
    return [
        Paragraph(_text(chunk).replace("\n", "<br/>"), style)
        for chunk in text.split("\n\n")
        if chunk.strip()
    ]


def create_observation_report_pdf(
    observation: Observation,
    report: ReportText,
    generated_on: date | None = None,
) -> bytes:
    """
    Generate the observation report.

    Args:
        observation: Observation with student, classroom, teacher, observer
            and entries loaded
        report: Summary and recommendations text
        generated_on: Date printed in the footer (defaults to today)

    Returns:
        PDF bytes
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        rightMargin=50,
        leftMargin=50,
        topMargin=50,
        bottomMargin=50,
        title="Classroom Observation Report",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Heading1"],
        fontSize=20,
        spaceAfter=12,
        textColor=colors.HexColor("#1e293b"),
    )
    heading_style = ParagraphStyle(
        "ReportHeading",
        parent=styles["Heading2"],
        fontSize=14,
        spaceAfter=8,
        spaceBefore=14,
        textColor=HEADER_COLOR,
    )
    body_style = ParagraphStyle(
        "ReportBody", parent=styles["Normal"], fontSize=10, leading=14, spaceAfter=8
    )
    cell_style = ParagraphStyle("ReportCell", parent=styles["Normal"], fontSize=8, leading=10)
    footer_style = ParagraphStyle(
        "ReportFooter",
        parent=styles["Normal"],
        fontSize=8,
        textColor=colors.HexColor("#64748b"),
    )

    student = observation.student
    observer = observation.observer
    elements = []

    elements.append(Paragraph("Classroom Observation Report", title_style))

    # Session details
    details = [
        ["Student", _text(f"{student.first_name} {student.last_name}"), "Grade", _text(student.grade)],
        ["School", _text(student.school.name), "Date", _text(observation.date.strftime("%B %d, %Y"))],
        [
            "Classroom",
            _text(observation.classroom.name),
            "Time",
            _text(f"{observation.start_time} - {observation.end_time or ''}"),
        ],
        [
            "Teacher",
            _text(f"{observation.teacher.first_name} {observation.teacher.last_name}"),
            "Setting",
            _text(observation.setting),
        ],
        [
            "Students",
            str(observation.total_students),
            "Adults",
            str(observation.total_teachers),
        ],
    ]
    if student.primary_idea_category:
        category = student.primary_idea_category.name
        if student.secondary_idea_category:
            category = f"{category}, {student.secondary_idea_category.name}"
        details.append(["IDEA", _text(category), "", ""])

    details_table = Table(
        [[Paragraph(cell, cell_style) for cell in row] for row in details],
        colWidths=[1 * inch, 2.5 * inch, 0.9 * inch, 2.5 * inch],
    )
    details_table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("FONTNAME", (2, 0), (2, -1), "Helvetica-Bold"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ]
        )
    )
    elements.append(details_table)

    elements.append(Paragraph("Purpose", heading_style))
    elements.extend(_paragraphs(observation.purpose, body_style))

    # Entries
    elements.append(Paragraph("Observation Data", heading_style))
    if observation.entries:
        entry_rows = [
            [Paragraph(f"<b>{label}</b>", cell_style) for label in ("Time", "Behavior", "Context", "Intervention")]
        ]
        for entry in observation.entries:
            entry_rows.append(
                [
                    Paragraph(_text(entry.timestamp), cell_style),
                    Paragraph(_text(entry.behavior), cell_style),
                    Paragraph(_text(entry.context), cell_style),
                    Paragraph(_text(entry.intervention), cell_style),
                ]
            )
        entries_table = Table(
            entry_rows,
            colWidths=[0.7 * inch, 2.4 * inch, 2.4 * inch, 1.4 * inch],
            repeatRows=1,
        )
        entries_table.setStyle(
            TableStyle(
                [
                    ("GRID", (0, 0), (-1, -1), 0.5, GRID_COLOR),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, ALT_ROW_COLOR]),
                ]
            )
        )
        elements.append(entries_table)
    else:
        elements.append(Paragraph("No entries were recorded.", body_style))

    elements.append(Paragraph("Summary", heading_style))
    elements.extend(_paragraphs(report.summary, body_style))

    elements.append(Paragraph("Recommendations", heading_style))
    elements.extend(_paragraphs(report.recommendations, body_style))

    # Footer
    elements.append(Spacer(1, 20))
    generated_on = generated_on or now_local().date()
    signature = f"{observer.first_name} {observer.last_name}"
    if observer.title:
        signature = f"{signature}, {observer.title}"
    elements.append(
        Paragraph(
            f"Report generated on {generated_on.strftime('%B %d, %Y')} by {_text(signature)}",
            footer_style,
        )
    )

    doc.build(elements)
    return buffer.getvalue()


def render_report_pdf(
    db: Session,
    principal: Principal,
    observation_id: UUID,
    assembler: ReportAssembler = assemble_report,
) -> bytes:
    """
    PDF for a stopped observation.

    Uses the saved report when the notes hold one, otherwise the assembled text.

    Raises:
        InvalidStatusTransition: observation is still draft
    """
    observation = observation_service.get_owned_observation(db, principal, observation_id)
    if observation.status not in PRINTABLE_STATUSES:
        raise InvalidStatusTransition("Stop the observation before printing its report")

    report = parse_report_notes(observation.notes)
    if report is None:
        report = assembler(observation.student.first_name, observation.entries)
    return create_observation_report_pdf(observation, report)
