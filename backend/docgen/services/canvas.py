"""Drawing primitives for canvas-mode documents, serialized to PDF with fpdf2.

Coordinates are points on a US-Letter page with the origin at the top-left
corner. Text ``y`` is the baseline.
"""
from dataclasses import dataclass, field

from fpdf import FPDF
from PIL import Image

from docgen.utils.text import latin1

PAGE_WIDTH = 612.0
PAGE_HEIGHT = 792.0
MARGIN = 50.0
BOTTOM_LIMIT = PAGE_HEIGHT - 70.0  # room for the footer

Color = tuple[int, int, int]

BLACK: Color = (26, 26, 26)
DARK: Color = (51, 51, 51)
MUTED: Color = (102, 102, 102)
LIGHT: Color = (136, 136, 136)
RULE: Color = (230, 230, 230)
WHITE: Color = (255, 255, 255)
DANGER: Color = (220, 38, 38)
BRAND_DEFAULT: Color = (37, 99, 235)


@dataclass(frozen=True)
class TextOp:
    x: float
    y: float
    text: str
    size: float
    bold: bool = False
    color: Color = BLACK


@dataclass(frozen=True)
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float = 0.5
    color: Color = RULE


@dataclass(frozen=True)
class RectOp:
    x: float
    y: float
    w: float
    h: float
    fill: Color | None = None
    border: Color | None = None


@dataclass(frozen=True)
class ImageOp:
    x: float
    y: float
    w: float
    h: float
    image: Image.Image


@dataclass
class Page:
    ops: list = field(default_factory=list)

    def texts(self) -> list[str]:
        return [op.text for op in self.ops if isinstance(op, TextOp)]


@dataclass
class Cursor:
    x: float = MARGIN
    y: float = MARGIN


class PageCanvas:
    """One render's pages and cursor. Never shared between renders."""

    def __init__(self, overflow_mode: str = "paginate"):
        self.overflow_mode = overflow_mode
        self.pages: list[Page] = []
        self.cursor = Cursor()
        self._metrics = FPDF(unit="pt", format="letter")
        self.new_page()

    # --- pages -----------------------------------------------------------

    @property
    def page(self) -> Page:
        return self.pages[-1]

    def new_page(self) -> Page:
        self.pages.append(Page())
        self.cursor = Cursor()
        return self.page

    def remaining(self) -> float:
        return BOTTOM_LIMIT - self.cursor.y

    def ensure_space(self, height: float, paginate: bool | None = None) -> bool:
        """True when ``height`` fits below the cursor, starting a new page if allowed."""
        if self.cursor.y + height <= BOTTOM_LIMIT:
            return True
        if paginate is None:
            paginate = self.overflow_mode == "paginate"
        if paginate:
            self.new_page()
            return True
        return False

    def advance(self, dy: float):
        self.cursor.y += dy

    # --- measurement -----------------------------------------------------

    def text_width(self, text: str, size: float, bold: bool = False) -> float:
        self._metrics.set_font("Helvetica", "B" if bold else "", size)
        return self._metrics.get_string_width(latin1(text))

    # --- drawing ---------------------------------------------------------

    def draw_text(self, text: str, x: float, y: float, size: float = 10, bold: bool = False,
                  color: Color = BLACK):
        if text:
            self.page.ops.append(TextOp(x, y, text, size, bold, color))

    def draw_text_right(self, text: str, right: float, y: float, size: float = 10,
                        bold: bool = False, color: Color = BLACK):
        self.draw_text(text, right - self.text_width(text, size, bold), y, size, bold, color)

    def draw_text_centered(self, text: str, y: float, size: float = 10, bold: bool = False,
                           color: Color = BLACK):
        x = (PAGE_WIDTH - self.text_width(text, size, bold)) / 2
        self.draw_text(text, x, y, size, bold, color)

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, width: float = 0.5,
                  color: Color = RULE):
        self.page.ops.append(LineOp(x1, y1, x2, y2, width, color))

    def draw_rect(self, x: float, y: float, w: float, h: float, fill: Color | None = None,
                  border: Color | None = None):
        self.page.ops.append(RectOp(x, y, w, h, fill, border))

    def draw_image(self, image: Image.Image, x: float, y: float, w: float, h: float):
        self.page.ops.append(ImageOp(x, y, w, h, image))

    # --- inspection ------------------------------------------------------

    def texts(self) -> list[str]:
        return [t for page in self.pages for t in page.texts()]

    def images(self) -> list[ImageOp]:
        return [op for page in self.pages for op in page.ops if isinstance(op, ImageOp)]


def to_pdf_bytes(canvas: PageCanvas) -> bytes:
    """Replay every page's ops onto an fpdf2 document."""
    pdf = FPDF(unit="pt", format="letter")
    pdf.set_auto_page_break(False)
    pdf.set_margins(0, 0, 0)
    for page in canvas.pages:
        pdf.add_page()
        for op in page.ops:
            if isinstance(op, TextOp):
                pdf.set_font("Helvetica", "B" if op.bold else "", op.size)
                pdf.set_text_color(*op.color)
                pdf.text(op.x, op.y, latin1(op.text))
            elif isinstance(op, LineOp):
                pdf.set_draw_color(*op.color)
                pdf.set_line_width(op.width)
                pdf.line(op.x1, op.y1, op.x2, op.y2)
            elif isinstance(op, RectOp):
                style = ""
                if op.fill is not None:
                    pdf.set_fill_color(*op.fill)
                    style += "F"
                if op.border is not None:
                    pdf.set_draw_color(*op.border)
                    pdf.set_line_width(0.75)
                    style = "DF" if style else "D"
                pdf.rect(op.x, op.y, op.w, op.h, style=style or "D")
            elif isinstance(op, ImageOp):
                pdf.image(op.image, x=op.x, y=op.y, w=op.w, h=op.h)
    return bytes(pdf.output())
