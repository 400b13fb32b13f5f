import io
import os
import logging
from datetime import datetime

from sxew_app.services.parameter_library import PARAMETER_SPECS
from sxew_app.services.result_library import RESULT_SPECS

logger = logging.getLogger(__name__)

EXPORT_DECIMALS = int(os.environ.get("SXEW_EXPORT_DECIMALS", "3"))

INPUT_SHEET = "Inputs"
OUTPUT_SHEET = "Outputs"
EXPORT_FILENAME = "HeapLeach_Calculation_Results"


def _sanitize(text) -> str:
    if not text:
        return ""
    s = str(text)
    s = s.replace("²", "2").replace("³", "3").replace("µ", "u")
    s = s.replace("η", "eta").replace("×", "x")
    s = s.replace("–", "-").replace("—", "--").replace(" ", " ")
    return s


def _round(val: float, decimals: int = EXPORT_DECIMALS) -> float:
    return round(float(val), decimals)


def input_rows(inputs: dict, decimals: int = EXPORT_DECIMALS) -> list[tuple]:
    """(name, symbol, value, unit) for every input, in library order."""
    return [
        (spec["label"], spec["symbol"], _round(inputs[key], decimals), spec["unit"])
        for key, spec in PARAMETER_SPECS.items()
    ]


def output_rows(results: dict, decimals: int = EXPORT_DECIMALS) -> list[tuple]:
    """(name, symbol, value, unit) for every result, in library order."""
    return [
        (spec["label"], spec["symbol"], _round(results[key], decimals), spec["unit"])
        for key, spec in RESULT_SPECS.items()
    ]


def export_calculation_excel(inputs: dict, results: dict) -> bytes:
    from openpyxl import Workbook
    from openpyxl.styles import Font

    wb = Workbook()
    wb.remove(wb.active)

    headers = ["Parameter", "Symbol", "Value", "Unit"]
    for title, rows in ((INPUT_SHEET, input_rows(inputs)), (OUTPUT_SHEET, output_rows(results))):
        ws = wb.create_sheet(title)
        ws.append(headers)
        for cell in ws[1]:
            cell.font = Font(bold=True)
        for row in rows:
            ws.append(list(row))
        for col_letter, w in [("A", 36), ("B", 18), ("C", 18), ("D", 16)]:
            ws.column_dimensions[col_letter].width = w

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.read()


def _draw_table(c, headers, rows, x, y, col_widths,
                font_size=8, header_bg="#1E3A5F", page_height=842):
    from reportlab.lib.colors import HexColor
    row_h = 14
    pad = 3
    table_w = sum(col_widths)

    def draw_row(cells, bold, bg=None):
        nonlocal y
        if y - row_h < 50:
            c.showPage()
            y = page_height - 50
            draw_row(headers, True, header_bg)
        if bg:
            c.setFillColor(HexColor(bg))
            c.rect(x, y - row_h, table_w, row_h, fill=1, stroke=0)
        c.setFont("Helvetica-Bold" if bold else "Helvetica", font_size)
        c.setFillColor(HexColor("#FFFFFF" if bg == header_bg else "#333333"))
        cx = x
        for i, cell in enumerate(cells):
            c.drawString(cx + pad, y - row_h + pad + 1, _sanitize(cell))
            cx += col_widths[i]
        c.setStrokeColor(HexColor("#CCCCCC"))
        c.setLineWidth(0.5)
        c.rect(x, y - row_h, table_w, row_h, fill=0, stroke=1)
        y -= row_h

    draw_row(headers, True, header_bg)
    for idx, row in enumerate(rows):
        draw_row([str(cell) for cell in row], False, "#F8F9FA" if idx % 2 == 1 else None)
    return y


def _add_section_header(c, title, y, left_margin, content_width, page_height=842):
    from reportlab.lib.colors import HexColor
    if y < 100:
        c.showPage()
        y = page_height - 50
    c.setFont("Helvetica-Bold", 12)
    c.setFillColor(HexColor("#1E3A5F"))
    c.drawString(left_margin, y, title)
    y -= 8
    c.setStrokeColor(HexColor("#CCCCCC"))
    c.setLineWidth(0.5)
    c.line(left_margin, y, left_margin + content_width, y)
    y -= 8
    return y


def export_calculation_pdf(inputs: dict, results: dict, analysis_text: str = "") -> bytes:
    from reportlab.lib.pagesizes import A4
    from reportlab.pdfgen import canvas
    from reportlab.lib.colors import HexColor

    page_width, page_height = A4
    left_margin = 50
    content_width = page_width - 100
    col_widths = [215, 90, 95, 95]

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)

    c.setFont("Helvetica-Bold", 18)
    c.setFillColor(HexColor("#1E3A5F"))
    c.drawCentredString(page_width / 2, page_height - 50, "SX-EW Heap Leach Calculation")
    c.setFont("Helvetica", 10)
    c.setFillColor(HexColor("#666666"))
    c.drawCentredString(page_width / 2, page_height - 68, f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}")

    y = page_height - 95
    headers = ["Parameter", "Symbol", "Value", "Unit"]

    y = _add_section_header(c, "Input Parameters", y, left_margin, content_width, page_height)
    y = _draw_table(c, headers, input_rows(inputs), left_margin, y, col_widths, page_height=page_height)
    y -= 20

    y = _add_section_header(c, "Calculated Results", y, left_margin, content_width, page_height)
    y = _draw_table(c, headers, output_rows(results), left_margin, y, col_widths, page_height=page_height)
    y -= 20

    if analysis_text:
        from reportlab.pdfbase.pdfmetrics import stringWidth
        y = _add_section_header(c, "Narrative Analysis", y, left_margin, content_width, page_height)
        c.setFont("Helvetica", 9)
        c.setFillColor(HexColor("#333333"))
        for paragraph in _sanitize(analysis_text).split("\n"):
            line = ""
            for word in paragraph.split():
                test = f"{line} {word}".strip()
                if stringWidth(test, "Helvetica", 9) > content_width:
                    if y < 60:
                        c.showPage()
                        c.setFont("Helvetica", 9)
                        y = page_height - 50
                    c.drawString(left_margin, y, line)
                    y -= 12
                    line = word
                else:
                    line = test
            if line:
                c.drawString(left_margin, y, line)
            y -= 14

    c.save()
    buf.seek(0)
    return buf.read()
