"""Completion certificate PDF (reportlab)."""

import io
from datetime import date

MAGENTA = (216, 70, 147)
FILENAME = "inventors-playbook-certificate.pdf"


def _rgb(canvas, rgb: tuple[int, int, int], stroke: bool = False) -> None:
    r, g, b = (c / 255 for c in rgb)
    if stroke:
        canvas.setStrokeColorRGB(r, g, b)
    else:
        canvas.setFillColorRGB(r, g, b)


def long_date(day: date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


def generate_certificate_pdf(display_name: str, issued_on: date | None = None) -> bytes:
    """Render the certificate for one participant. Returns PDF bytes."""
    from reportlab.lib.pagesizes import A4, landscape
    from reportlab.lib.units import mm
    from reportlab.pdfgen import canvas as rl_canvas

    buf = io.BytesIO()
    width, height = landscape(A4)
    c = rl_canvas.Canvas(buf, pagesize=(width, height))
    c.setTitle("Certificate of Completion")
    margin = 20 * mm
    cx = width / 2

    # reportlab's origin is bottom-left; layout is measured from the top
    def top(y_mm: float) -> float:
        return height - y_mm * mm

    # Borders
    _rgb(c, MAGENTA, stroke=True)
    c.setLineWidth(3 * mm)
    c.rect(margin, margin, width - 2 * margin, height - 2 * margin)
    c.setStrokeColorRGB(0, 0, 0)
    c.setLineWidth(0.5 * mm)
    inset = margin + 5 * mm
    c.rect(inset, inset, width - 2 * inset, height - 2 * inset)

    _rgb(c, (150, 150, 150))
    c.setFont("Times-Roman", 14)
    c.drawCentredString(cx, top(50), "CERTIFICATE OF COMPLETION")

    c.setFillColorRGB(0, 0, 0)
    c.setFont("Times-Italic", 36)
    c.drawCentredString(cx, top(70), "the inventor's playbook")

    _rgb(c, MAGENTA, stroke=True)
    c.setLineWidth(1 * mm)
    c.line(cx - 60 * mm, top(80), cx + 60 * mm, top(80))

    _rgb(c, (100, 100, 100))
    c.setFont("Times-Roman", 12)
    c.drawCentredString(cx, top(95), "This certifies that")

    c.setFillColorRGB(0, 0, 0)
    c.setFont("Times-Bold", 24)
    c.drawCentredString(cx, top(110), display_name)

    _rgb(c, (100, 100, 100))
    c.setFont("Times-Roman", 12)
    c.drawCentredString(cx, top(125), "has successfully completed all exercises in")

    _rgb(c, MAGENTA)
    c.setFont("Times-Italic", 16)
    c.drawCentredString(cx, top(138), "The Inventor's Playbook: A Cinematic Activation")

    _rgb(c, (100, 100, 100))
    c.setFont("Times-Roman", 11)
    c.drawCentredString(cx, top(155), long_date(issued_on or date.today()))

    # Footer branding
    footer_y = margin + 15 * mm
    _rgb(c, (150, 150, 150))
    c.setFont("Helvetica", 10)
    c.drawCentredString(cx - 30 * mm, footer_y, "lightmile media")
    c.drawCentredString(cx, footer_y, "|")
    _rgb(c, MAGENTA)
    c.setFont("Helvetica-Bold", 10)
    c.drawCentredString(cx + 30 * mm, footer_y, "eos Products")

    c.showPage()
    c.save()
    return buf.getvalue()
