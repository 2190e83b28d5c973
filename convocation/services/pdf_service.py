import re
from pathlib import Path
from typing import List, Tuple

from fpdf import FPDF
from PIL import Image

from .. import config
from ..models import TicketRecord

# Unicode TTF so names outside Latin-1 still print
FONT_DIR = Path(__file__).resolve().parent.parent / "fonts"
FONT_FAMILY = "DejaVu"

# Narrow portrait ticket stock, width x height in mm
TICKET_SIZE_MM = (120, 215)

HEADER_HEIGHT = 100
HEADER_COLOR = (108, 0, 255)
ACCENT_COLOR = (155, 80, 255)
NOTCH_RADIUS = 6

QR_SIZE = 55
QR_TOP = 10

DETAIL_LEFT = 10
DETAIL_LABEL_WIDTH = 30
DETAIL_LINE_HEIGHT = 6

INFO_TEXT = "Please present this ticket at the entrance for verification. Keep your QR code visible."
SCANNING_INSTRUCTIONS = [
    "- The first scanning point will be at Payaswini, where 10 volunteers will be deployed for verification.",
    "- The second scanning point will be at the Pandal (main event venue).",
    "- Only those who have successfully completed the first scanning at Payaswini will be permitted "
    "for second scanning at the Pandal.",
]


def ticket_filename(roll_no: str) -> str:
    safe_roll = re.sub(r"[^A-Za-z0-9_-]", "_", str(roll_no))
    return f"{config.TICKET_FILE_PREFIX}_{safe_roll}.pdf"


def ticket_detail_lines(ticket: TicketRecord) -> List[Tuple[str, str]]:
    """Ticket holder details in print order. Guests without a name get no line."""
    lines = [
        ("Student", ticket.name),
        ("Roll No", ticket.roll_no),
        ("Programme", ticket.programme or "-"),
        ("Year of Passing", ticket.year_of_passing or "-"),
        ("Email", str(ticket.email)),
    ]
    for label, guest in (("Guest 1", ticket.guest_1_name), ("Guest 2", ticket.guest_2_name)):
        if guest and guest.strip():
            lines.append((label, guest.strip()))
    return lines


def _centered(pdf: FPDF, text: str, y: float):
    page_w = pdf.w
    pdf.text((page_w - pdf.get_string_width(text)) / 2, y, text)


def _wrap(pdf: FPDF, text: str, width: float) -> List[str]:
    return pdf.multi_cell(width, 5, text, dry_run=True, output="LINES")


def _draw_header(pdf: FPDF, qr_image: Image.Image):
    page_w, page_h = pdf.w, pdf.h

    pdf.set_fill_color(*HEADER_COLOR)
    pdf.rect(0, 0, page_w, HEADER_HEIGHT, style="F")
    pdf.set_fill_color(*ACCENT_COLOR)
    pdf.polygon(
        [(0, HEADER_HEIGHT - 20), (page_w, HEADER_HEIGHT - 45), (page_w, HEADER_HEIGHT)],
        style="F",
    )

    # ticket notches
    pdf.set_fill_color(255, 255, 255)
    pdf.circle(page_w / 2, 0, NOTCH_RADIUS, style="F")
    pdf.circle(page_w / 2, page_h, NOTCH_RADIUS, style="F")

    qr_x = (page_w - QR_SIZE) / 2
    pdf.image(qr_image, x=qr_x, y=QR_TOP, w=QR_SIZE, h=QR_SIZE)

    below_qr = QR_TOP + QR_SIZE
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(FONT_FAMILY, style="B", size=9)
    _centered(pdf, "SCAN HERE!", below_qr + 5)
    pdf.set_font_size(14)
    _centered(pdf, config.EVENT_TITLE, below_qr + 15)
    pdf.set_font_size(10)
    _centered(pdf, config.EVENT_SUBTITLE, below_qr + 21)

    pdf.set_font(FONT_FAMILY, size=8)
    y = below_qr + 30
    for line in _wrap(pdf, INFO_TEXT, page_w - 16):
        _centered(pdf, line, y)
        y += 4


def _draw_details(pdf: FPDF, ticket: TicketRecord):
    page_w, page_h = pdf.w, pdf.h

    pdf.set_fill_color(255, 255, 255)
    pdf.rect(0, HEADER_HEIGHT, page_w, page_h - HEADER_HEIGHT, style="F")

    y = HEADER_HEIGHT + 8
    pdf.set_text_color(0, 0, 0)
    pdf.set_font(FONT_FAMILY, style="B", size=11)
    _centered(pdf, "ENTRY AND SCANNING DETAILS", y)

    y += 4
    box_margin = 8
    pdf.set_draw_color(200)
    pdf.set_line_width(0.3)
    pdf.rect(box_margin, y, page_w - box_margin * 2, 35, style="D", round_corners=True, corner_radius=3)

    y += 6
    pdf.set_font(FONT_FAMILY, size=9)
    for instruction in SCANNING_INSTRUCTIONS:
        wrapped = _wrap(pdf, instruction, page_w - 25)
        for offset, line in enumerate(wrapped):
            pdf.text(box_margin + 2, y + offset * 4, line)
        y += len(wrapped) * 5

    y += 6
    pdf.set_font(FONT_FAMILY, style="B", size=11)
    _centered(pdf, "TICKET HOLDER DETAILS", y)

    y += 8
    for label, value in ticket_detail_lines(ticket):
        pdf.set_font(FONT_FAMILY, style="B", size=10)
        pdf.text(DETAIL_LEFT, y, f"{label}:")
        pdf.set_font(FONT_FAMILY, size=10)
        pdf.text(DETAIL_LEFT + DETAIL_LABEL_WIDTH, y, value)
        y += DETAIL_LINE_HEIGHT

    pdf.set_font_size(8)
    pdf.set_text_color(120)
    _centered(pdf, config.TICKET_FOOTER, page_h - 4)


def build_ticket_pdf(ticket: TicketRecord, qr_image: Image.Image) -> bytes:
    pdf = FPDF(orientation="P", unit="mm", format=TICKET_SIZE_MM)
    pdf.set_auto_page_break(auto=False)
    pdf.add_font(FONT_FAMILY, "", str(FONT_DIR / "DejaVuSans.ttf"))
    pdf.add_font(FONT_FAMILY, "B", str(FONT_DIR / "DejaVuSans-Bold.ttf"))
    pdf.set_title(f"{config.EVENT_TITLE} - {ticket.roll_no}")
    pdf.set_creator(config.EVENT_SUBTITLE)
    pdf.add_page()

    _draw_header(pdf, qr_image)
    _draw_details(pdf, ticket)

    return bytes(pdf.output())
