"""PDF rendering for printable soroban worksheets.

Layout follows the classic mental-arithmetic sheet:
- Examples printed as vertical columns, several per row
- Name / Date / Score header fields
- Answer line under every column (filled in on the answer copy)
- Separate answer key grid
"""

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle,
    PageBreak, HRFlowable,
)
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
import io

from soroban.services.narration import step_token, step_value


# ──────────────────────────────────────────────
# Colours
# ──────────────────────────────────────────────
_PRIMARY = colors.Color(0.15, 0.32, 0.22)       # deep forest green
_LIGHT_BG = colors.Color(0.96, 0.96, 0.94)      # warm off-white
_MUTED = colors.Color(0.55, 0.55, 0.55)         # muted grey
_RULE = colors.Color(0.82, 0.82, 0.78)          # ruled line colour
_SPECIAL = colors.Color(0.80, 0.60, 0.15)       # marks rule-family steps on the answer copy

# Columns of examples per row
_COLUMNS = 5

PDF_TYPES = ("full", "student", "answer_key")


# ──────────────────────────────────────────────
# Unicode → latin-1 safe replacements
# ──────────────────────────────────────────────
_UNICODE_REPLACEMENTS = {
    "—": "-",   # em dash
    "–": "-",   # en dash
    "−": "-",   # minus sign
    "‘": "'",   # left single quote
    "’": "'",   # right single quote
    "“": '"',   # left double quote
    "”": '"',   # right double quote
    "…": "...", # ellipsis
    "×": "x",   # multiplication sign
}


def _sanitize_text(text: str) -> str:
    """Replace Unicode characters that Helvetica/latin-1 cannot encode."""
    if not text:
        return ""
    for char, replacement in _UNICODE_REPLACEMENTS.items():
        text = text.replace(char, replacement)
    return text.encode("latin-1", errors="replace").decode("latin-1")


def _chunk(items: list, size: int) -> list[list]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def worksheet_title(worksheet: dict) -> str:
    if worksheet.get("title"):
        return worksheet["title"]
    settings = worksheet.get("settings") or {}
    family = str(settings.get("family", "simple")).capitalize()
    digits = settings.get("digits") or []
    if digits and family.lower() != "simple":
        return f"{family}: {', '.join(str(d) for d in digits)}"
    return f"{family} practice"


class PDFService:
    """Service for generating printable worksheet PDFs."""

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()
        self._page_count = 0

    def _setup_custom_styles(self):
        self.styles.add(ParagraphStyle(
            name='WorksheetTitle',
            fontName='Helvetica-Bold',
            fontSize=18,
            leading=22,
            spaceAfter=4,
            alignment=TA_CENTER,
            textColor=_PRIMARY,
        ))
        self.styles.add(ParagraphStyle(
            name='HeaderField',
            fontName='Helvetica',
            fontSize=10,
            leading=14,
            textColor=_MUTED,
        ))
        self.styles.add(ParagraphStyle(
            name='StepCell',
            fontName='Helvetica',
            fontSize=12,
            leading=15,
            alignment=TA_RIGHT,
        ))
        self.styles.add(ParagraphStyle(
            name='ExampleNumber',
            fontName='Helvetica-Bold',
            fontSize=9,
            leading=11,
            alignment=TA_CENTER,
            textColor=_PRIMARY,
        ))
        self.styles.add(ParagraphStyle(
            name='AnswerKeyTitle',
            fontName='Helvetica-Bold',
            fontSize=14,
            leading=18,
            spaceAfter=6,
            textColor=_PRIMARY,
        ))
        self.styles.add(ParagraphStyle(
            name='AnswerText',
            fontName='Helvetica',
            fontSize=10,
            leading=13,
        ))

    # ──────────────────────────────────────────
    # Main entry point
    # ──────────────────────────────────────────
    def generate_worksheet_pdf(self, worksheet: dict, pdf_type: str = "full") -> bytes:
        """Render a worksheet dict (as built by generate_worksheet).

        Args:
            worksheet: examples, settings, show_answers, ...
            pdf_type: "full" (examples + answer key), "student" (examples only),
                      "answer_key" (answer key only)

        Returns:
            PDF file as bytes
        """
        if pdf_type not in PDF_TYPES:
            raise ValueError(f"pdf_type must be one of {PDF_TYPES}, got {pdf_type!r}")

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=1.5 * cm,
            leftMargin=1.5 * cm,
            topMargin=2.0 * cm,
            bottomMargin=2.0 * cm,
        )
        self._page_count = 0

        story = []
        examples = worksheet.get('examples', [])

        if pdf_type == "answer_key":
            self._build_answer_key(story, worksheet, examples)
        else:
            self._build_examples(story, worksheet, examples, show_answers=worksheet.get("show_answers", False))
            if pdf_type == "full" and examples:
                story.append(PageBreak())
                self._build_answer_key(story, worksheet, examples)

        doc.build(
            story,
            onFirstPage=self._draw_page_furniture,
            onLaterPages=self._draw_page_furniture,
        )
        buffer.seek(0)
        return buffer.getvalue()

    # ──────────────────────────────────────────
    # Page furniture
    # ──────────────────────────────────────────
    def _draw_page_furniture(self, canvas, doc):
        canvas.saveState()
        page_width, page_height = A4
        self._page_count += 1

        canvas.setStrokeColor(_PRIMARY)
        canvas.setLineWidth(1.5)
        canvas.line(1.5 * cm, page_height - 1.6 * cm,
                    page_width - 1.5 * cm, page_height - 1.6 * cm)

        y_footer = 1.0 * cm
        canvas.setFont('Helvetica', 7)
        canvas.setFillColor(_MUTED)
        canvas.drawString(1.5 * cm, y_footer, "Soroban Trainer")
        canvas.drawRightString(page_width - 1.5 * cm, y_footer, f"Page {self._page_count}")

        canvas.setStrokeColor(_RULE)
        canvas.setLineWidth(0.5)
        canvas.line(1.5 * cm, y_footer + 10, page_width - 1.5 * cm, y_footer + 10)
        canvas.restoreState()

    # ──────────────────────────────────────────
    # Examples section
    # ──────────────────────────────────────────
    def _build_examples(self, story: list, worksheet: dict, examples: list, show_answers: bool) -> None:
        story.append(Paragraph(_sanitize_text(worksheet_title(worksheet)), self.styles['WorksheetTitle']))
        self._build_header_fields(story)

        page_width = A4[0] - 3.0 * cm
        col_w = page_width / _COLUMNS
        for row in _chunk(examples, _COLUMNS):
            cells = [self._build_example_column(ex, show_answers) for ex in row]
            while len(cells) < _COLUMNS:
                cells.append('')
            table = Table([cells], colWidths=[col_w] * _COLUMNS)
            table.setStyle(TableStyle([
                ('VALIGN', (0, 0), (-1, -1), 'TOP'),
                ('LEFTPADDING', (0, 0), (-1, -1), 4),
                ('RIGHTPADDING', (0, 0), (-1, -1), 4),
            ]))
            story.append(table)
            story.append(Spacer(1, 14))

    def _build_header_fields(self, story: list) -> None:
        fields = Table([[
            Paragraph("Name: ____________________", self.styles['HeaderField']),
            Paragraph("Date: ____________", self.styles['HeaderField']),
            Paragraph("Score: _____", self.styles['HeaderField']),
        ]], colWidths=[8 * cm, 5 * cm, 4 * cm])
        story.append(fields)
        story.append(HRFlowable(width="100%", thickness=0.5, color=_RULE, spaceBefore=6, spaceAfter=12))

    def _build_example_column(self, example: dict, show_answer: bool) -> Table:
        rows = [[Paragraph(f"{example.get('index', '')}", self.styles['ExampleNumber'])]]
        special_rows = []
        for step in example.get('steps', []):
            if isinstance(step, dict):
                special_rows.append(len(rows))
            rows.append([Paragraph(step_token(step_value(step)), self.styles['StepCell'])])
        answer = str(example.get('answer', '')) if show_answer else ''
        rows.append([Paragraph(answer, self.styles['StepCell'])])

        table = Table(rows, colWidths=[2.6 * cm])
        style = [
            ('BOX', (0, 0), (-1, -1), 0.5, _RULE),
            ('BACKGROUND', (0, 0), (-1, 0), _LIGHT_BG),
            ('LINEABOVE', (0, -1), (-1, -1), 1.2, _PRIMARY),
            ('TOPPADDING', (0, 0), (-1, -1), 2),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
        ]
        if show_answer:
            style += [('TEXTCOLOR', (0, r), (-1, r), _SPECIAL) for r in special_rows]
        table.setStyle(TableStyle(style))
        return table

    # ──────────────────────────────────────────
    # Answer key section
    # ──────────────────────────────────────────
    def _build_answer_key(self, story: list, worksheet: dict, examples: list) -> None:
        title = _sanitize_text(worksheet_title(worksheet))
        story.append(Paragraph(f"{title} - Answer Key", self.styles['AnswerKeyTitle']))
        story.append(HRFlowable(
            width="100%", thickness=0.5, color=_PRIMARY,
            spaceBefore=2, spaceAfter=14,
        ))

        cells = [
            Paragraph(f"<b>{ex.get('index', i)}:</b> {ex.get('answer', 'N/A')}", self.styles['AnswerText'])
            for i, ex in enumerate(examples, 1)
        ]
        answer_data = _chunk(cells, _COLUMNS)
        if answer_data and len(answer_data[-1]) < _COLUMNS:
            answer_data[-1] += [''] * (_COLUMNS - len(answer_data[-1]))

        if answer_data:
            page_width = A4[0] - 3.0 * cm
            col_w = page_width / _COLUMNS
            answer_table = Table(answer_data, colWidths=[col_w] * _COLUMNS)
            answer_table.setStyle(TableStyle([
                ('VALIGN', (0, 0), (-1, -1), 'TOP'),
                ('TOPPADDING', (0, 0), (-1, -1), 6),
                ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
                ('LEFTPADDING', (0, 0), (-1, -1), 6),
                ('GRID', (0, 0), (-1, -1), 0.4, _RULE),
                *[
                    ('BACKGROUND', (0, r), (-1, r), _LIGHT_BG)
                    for r in range(0, len(answer_data), 2)
                ],
            ]))
            story.append(answer_table)

        best_effort = [ex.get('index') for ex in examples if ex.get('best_effort')]
        if best_effort:
            story.append(Spacer(1, 10))
            story.append(Paragraph(
                f"<i>Simplified examples: {', '.join(str(i) for i in best_effort)}</i>",
                self.styles['HeaderField'],
            ))


def get_pdf_service() -> PDFService:
    return PDFService()
