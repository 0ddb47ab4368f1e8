"""
Application PDF rendering

Builds the printable "Part Application Form" for one application with the
reportlab canvas. Layout is tracked as a vertical cursor in millimetres from
the top of the page and converted to reportlab's bottom-left coordinates when
drawing.
"""

from datetime import datetime
from io import BytesIO
from typing import List, Optional, Tuple

from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from PartsCatalogue.clients.base_store import BlobStore, blob_key_for
from PartsCatalogue.models.application_models import PartApplication
from PartsCatalogue.services.base_service import BaseService

IMAGE_EXTENSIONS = (".png", ".jpg", ".webp")


class PageLayout:
    """A4 portrait layout, all values in millimetres"""
    WIDTH = A4[0] / mm
    HEIGHT = A4[1] / mm
    MARGIN = 20
    CONTENT_WIDTH = WIDTH - 2 * MARGIN
    LABEL_WIDTH = 40
    LINE_HEIGHT = 5

    TEXT_SECTION_THRESHOLD = 60
    IMAGE_SECTION_THRESHOLD = 100
    IMAGE_MAX_HEIGHT = 120
    IMAGE_DENSITY = 4
    FOOTER_OFFSET = 15


def fit_image_size(width: float, height: float,
                   max_width: float = PageLayout.CONTENT_WIDTH,
                   max_height: float = PageLayout.IMAGE_MAX_HEIGHT) -> Tuple[float, float]:
    """Shrink (width, height) to fit the box, keeping the aspect ratio."""
    aspect_ratio = width / height
    if width > max_width:
        width = max_width
        height = width / aspect_ratio
    if height > max_height:
        height = max_height
        width = height * aspect_ratio
    return width, height


def format_cost(value: str) -> str:
    try:
        return f"${float(value):,.2f}"
    except (TypeError, ValueError):
        return value or "$0.00"


def split_specifications(value: Optional[str]) -> Tuple[str, Optional[str]]:
    """
    Split free-text specifications into a one-line summary and the remaining
    detail, which is None when the text is a single line.
    """
    lines = (value or "").strip().splitlines()
    if not lines:
        return "", None
    details = "\n".join(lines[1:]).strip()
    return lines[0].strip(), details or None


def format_date(value: Optional[str]) -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except ValueError:
        return value


class _FormWriter:
    """Draws text onto a canvas while tracking the cursor and page breaks."""

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf
        self.y = PageLayout.MARGIN
        self.pages = 1

    def _baseline(self) -> float:
        return (PageLayout.HEIGHT - self.y) * mm

    def font(self, size: int, bold: bool = False):
        self.pdf.setFont("Helvetica-Bold" if bold else "Helvetica", size)

    def new_page_if_needed(self, threshold: float):
        if self.y > PageLayout.HEIGHT - threshold:
            self.pdf.showPage()
            self.pages += 1
            self.y = PageLayout.MARGIN

    def text(self, value: str, x: float = PageLayout.MARGIN):
        self.pdf.drawString(x * mm, self._baseline(), value)

    def centred(self, value: str):
        self.pdf.drawCentredString(PageLayout.WIDTH / 2 * mm, self._baseline(), value)

    def wrapped(self, value: str, x: float, width: float, size: int = 12) -> int:
        lines = simpleSplit(value or "", "Helvetica", size, width * mm) or [""]
        for index, line in enumerate(lines):
            self.pdf.drawString(x * mm, (PageLayout.HEIGHT - self.y - index * PageLayout.LINE_HEIGHT) * mm, line)
        return len(lines)

    def heading(self, title: str, threshold: float = PageLayout.TEXT_SECTION_THRESHOLD):
        self.new_page_if_needed(threshold)
        self.font(12, bold=True)
        self.text(title)
        self.y += 8
        self.font(12)

    def labelled_fields(self, fields: List[Tuple[str, str]], wrap: bool):
        for label, value in fields:
            self.font(12, bold=True)
            self.text(label)
            self.font(12)
            if wrap:
                count = self.wrapped(value, PageLayout.MARGIN + PageLayout.LABEL_WIDTH,
                                     PageLayout.CONTENT_WIDTH - PageLayout.LABEL_WIDTH)
                self.y += count * PageLayout.LINE_HEIGHT + 3
            else:
                self.text(value or "", PageLayout.MARGIN + PageLayout.LABEL_WIDTH)
                self.y += 7
        self.y += 5

    def paragraph_section(self, title: str, body: Optional[str]):
        if not body:
            return
        self.heading(title)
        count = self.wrapped(body, PageLayout.MARGIN, PageLayout.CONTENT_WIDTH)
        self.y += count * PageLayout.LINE_HEIGHT + 10


class ApplicationPdfService(BaseService):
    """Renders part applications to PDF bytes."""

    def __init__(self, blob_store: BlobStore, image_key_prefix: str = ""):
        super().__init__()
        self.blob_store = blob_store
        self.image_key_prefix = image_key_prefix

    @staticmethod
    def filename(application: PartApplication) -> str:
        return f"{application.id}_application.pdf"

    def image_candidates(self, application: PartApplication) -> List[str]:
        """Stored image URL first, then the public URLs for the image identifier."""
        candidates = []
        if application.image_url:
            candidates.append(application.image_url)
        identifier = application.image_identifier
        for extension in IMAGE_EXTENSIONS:
            url = self.blob_store.public_url(blob_key_for(identifier, self.image_key_prefix, extension))
            if url not in candidates:
                candidates.append(url)
        return candidates

    async def load_image(self, application: PartApplication) -> Optional[Image.Image]:
        for url in self.image_candidates(application):
            try:
                data = await self.blob_store.fetch_bytes(url)
                image = Image.open(BytesIO(data))
                image.load()
                self.logger.debug(f"Using image {url} for {application.id}")
                return image
            except Exception as e:
                self.logger.warning(f"Failed to load image from {url}: {e}")
        return None

    @staticmethod
    def _rasterise(image: Image.Image, width_mm: float, height_mm: float) -> ImageReader:
        size = (max(1, round(width_mm * PageLayout.IMAGE_DENSITY)),
                max(1, round(height_mm * PageLayout.IMAGE_DENSITY)))
        raster = image.convert("RGB").resize(size, Image.LANCZOS)
        buffer = BytesIO()
        raster.save(buffer, format="JPEG", quality=90)
        buffer.seek(0)
        return ImageReader(buffer)

    async def render(self, application: PartApplication) -> bytes:
        image = await self.load_image(application)
        self.log_operation("render", "application", application.id)

        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.setTitle(f"Part Application {application.id}")
        writer = _FormWriter(pdf)

        writer.font(20, bold=True)
        writer.centred("Part Application Form")
        writer.y += 15

        writer.font(12)
        writer.text(f"Ticket ID: {application.id}")
        writer.y += 10
        writer.text(f"Application Date: {format_date(application.submitted_at)}")
        writer.y += 15

        writer.font(10)
        writer.text(f"Status: {application.status.value.upper()}")
        writer.text(f"Priority: {application.priority.value.upper()}", PageLayout.MARGIN + 60)
        writer.y += 15

        summary, details = split_specifications(application.specifications)

        writer.heading("Part Information")
        writer.labelled_fields([
            ("Part Code:", application.part_code or "Pending"),
            ("Supplier:", application.supplier),
            ("Description:", summary),
        ], wrap=True)

        writer.heading("Request Information")
        writer.labelled_fields([
            ("Requested By:", application.requested_by),
            ("Department:", application.department),
            ("Estimated Cost:", format_cost(application.standard_price)),
        ], wrap=False)

        writer.paragraph_section("Technical Specifications", details)
        writer.paragraph_section("Business Justification", application.justification)
        writer.paragraph_section("Additional Notes", application.notes)

        if image is not None:
            writer.new_page_if_needed(PageLayout.IMAGE_SECTION_THRESHOLD)
            writer.font(12, bold=True)
            writer.text("Attached Image")
            writer.y += 10
            width, height = fit_image_size(*image.size)
            pdf.drawImage(self._rasterise(image, width, height),
                          PageLayout.MARGIN * mm, (PageLayout.HEIGHT - writer.y - height) * mm,
                          width=width * mm, height=height * mm)
            writer.y += height + 10

        pdf.setFont("Helvetica", 8)
        pdf.drawCentredString(PageLayout.WIDTH / 2 * mm, PageLayout.FOOTER_OFFSET * mm,
                              f"Generated: {datetime.now().strftime('%Y-%m-%d')} | Parts Application System")
        pdf.showPage()
        pdf.save()

        self.logger.info(f"Rendered {writer.pages} page(s) for application {application.id}")
        return buffer.getvalue()
