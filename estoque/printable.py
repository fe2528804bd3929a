"""Multi-section PDF export using ReportLab."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Sequence
from xml.sax.saxutils import escape

from . import schema

if TYPE_CHECKING:
    from .config import OrganizationConfig

DEFAULT_TITLE = "Exportação de Dados"

_FONT = "Helvetica"
_FONT_BOLD = "Helvetica-Bold"
_HEADER_FILL = "#2980B9"
_STRIPE_FILL = "#F5F5F5"


@dataclass
class DocumentHeader:
    """Organization details printed on the first page and in footers."""

    company_name: str = ""
    cnpj: str = ""
    address: str = ""
    logo_path: str = ""
    responsible: list[str] = field(default_factory=list)
    developer_name: str = ""

    @classmethod
    def from_organization(cls, org: OrganizationConfig) -> DocumentHeader:
        responsible = []
        if org.secretary_name:
            responsible.append(f"Secretário(a): {org.secretary_name}")
        if org.coordinator_name:
            responsible.append(f"Coordenador(a): {org.coordinator_name}")
        return cls(
            company_name=org.company_name,
            cnpj=org.cnpj,
            address=org.address,
            logo_path=org.logo_path,
            responsible=responsible,
            developer_name=org.developer_name,
        )


def cell_text(value: Any) -> str:
    """Text shown in a PDF table cell."""
    if value is None or value == "":
        return "-"
    if isinstance(value, bool):
        return schema.YES if value else schema.NO
    return str(value)


def footer_lines(header: DocumentHeader, page: int, total: int) -> list[str]:
    lines = []
    if header.responsible:
        lines.append(" | ".join(header.responsible))
    if header.developer_name:
        lines.append(f"Desenvolvido por: {header.developer_name}")
    lines.append(f"Página {page} de {total}")
    return lines


def _numbered_canvas(header: DocumentHeader):
    """Canvas class that draws the footer once the page count is known."""
    from reportlab.lib import colors
    from reportlab.lib.units import mm
    from reportlab.pdfgen import canvas

    class NumberedCanvas(canvas.Canvas):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self._saved_page_states: list[dict] = []

        def showPage(self):
            self._saved_page_states.append(dict(self.__dict__))
            self._startPage()

        def save(self):
            total = len(self._saved_page_states)
            for state in self._saved_page_states:
                self.__dict__.update(state)
                self._draw_footer(total)
                super().showPage()
            super().save()

        def _draw_footer(self, total: int) -> None:
            width, _ = self._pagesize
            lines = footer_lines(header, self._pageNumber, total)
            self.saveState()
            self.setFont(_FONT, 7)
            self.setFillColor(colors.grey)
            y = 8 * mm + (len(lines) - 1) * 3.5 * mm
            for line in lines:
                self.drawCentredString(width / 2, y, line)
                y -= 3.5 * mm
            self.restoreState()

    return NumberedCanvas


def render_printable(
    collections: Mapping[str, Sequence[Mapping[str, Any]]],
    title: str = DEFAULT_TITLE,
    header: DocumentHeader | None = None,
    generated_at: datetime | None = None,
) -> bytes:
    """Render one striped table per collection into a PDF.

    Args:
        collections: Rows per collection, rendered in mapping order.
        title: Used as the document heading when no organization name is set.
        header: Organization details for the header and footer.
        generated_at: Timestamp printed in the header. Defaults to now.

    Returns:
        The PDF file contents.

    Raises:
        ImportError: If reportlab is not installed.
    """
    try:
        from reportlab.lib import colors
        from reportlab.lib.pagesizes import A4
        from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
        from reportlab.lib.units import mm
        from reportlab.platypus import (
            CondPageBreak,
            Image,
            Paragraph,
            SimpleDocTemplate,
            Spacer,
            Table,
            TableStyle,
        )
    except ImportError:
        raise ImportError(
            "reportlab é necessário: pip install 'estoque[pdf]'"
        )

    header = header or DocumentHeader()
    generated_at = generated_at or datetime.now()

    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=14 * mm,
        rightMargin=14 * mm,
        topMargin=15 * mm,
        bottomMargin=22 * mm,
        title=header.company_name or title,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "DocTitle",
        parent=styles["Title"],
        fontName=_FONT_BOLD,
        fontSize=16,
        leading=20,
        alignment=0,
    )
    info_style = ParagraphStyle(
        "DocInfo",
        parent=styles["Normal"],
        fontName=_FONT,
        fontSize=10,
        leading=13,
    )
    section_style = ParagraphStyle(
        "Section",
        parent=styles["Heading2"],
        fontName=_FONT_BOLD,
        fontSize=12,
        leading=16,
        spaceAfter=2 * mm,
    )
    cell_style = ParagraphStyle(
        "Cell",
        parent=styles["Normal"],
        fontName=_FONT,
        fontSize=8,
        leading=10,
    )
    head_cell_style = ParagraphStyle(
        "HeadCell",
        parent=cell_style,
        fontName=_FONT_BOLD,
        textColor=colors.white,
    )

    elements: list = []

    # Document header: optional logo beside the organization block
    info = [Paragraph(escape(header.company_name or title), title_style)]
    if header.cnpj:
        info.append(Paragraph(escape(f"CNPJ: {header.cnpj}"), info_style))
    if header.address:
        info.append(Paragraph(escape(header.address), info_style))
    info.append(
        Paragraph(
            f"Data: {generated_at:%d/%m/%Y} às {generated_at:%H:%M}", info_style
        )
    )

    logo_path = Path(header.logo_path).expanduser() if header.logo_path else None
    if logo_path is not None and logo_path.is_file():
        logo = Image(str(logo_path), width=25 * mm, height=25 * mm, kind="proportional")
        block = Table([[logo, info]], colWidths=[31 * mm, doc.width - 31 * mm])
        block.setStyle(TableStyle([
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ]))
        elements.append(block)
    else:
        elements.extend(info)
    elements.append(Spacer(1, 8 * mm))

    table_style = TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(_HEADER_FILL)),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor(_STRIPE_FILL)]),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ("LEFTPADDING", (0, 0), (-1, -1), 4),
        ("RIGHTPADDING", (0, 0), (-1, -1), 4),
    ])

    names = list(collections)
    for i, collection in enumerate(names):
        columns = schema.columns_for(collection)
        elements.append(Paragraph(escape(schema.label_for(collection)), section_style))

        table_data = [[Paragraph(escape(c.label), head_cell_style) for c in columns]]
        for row in collections[collection]:
            table_data.append([
                Paragraph(escape(cell_text(row.get(c.key))), cell_style)
                for c in columns
            ])
        col_width = doc.width / len(columns)
        t = Table(table_data, colWidths=[col_width] * len(columns), repeatRows=1)
        t.setStyle(table_style)
        elements.append(t)

        if i < len(names) - 1:
            elements.append(Spacer(1, 8 * mm))
            # Start the next section on a fresh page when near the bottom
            elements.append(CondPageBreak(40 * mm))

    doc.build(elements, canvasmaker=_numbered_canvas(header))
    return buf.getvalue()
