"""
Формирование PDF документа сертификата участия.

Страница A4 в альбомной ориентации. Вертикальная раскладка строится
потоком: каждый блок начинается от позиции курсора, а курсор сдвигается
на высоту эмблемы и на число строк абзаца о роли участника. Все
координаты раскладки задаются в миллиметрах от верхнего края страницы
и переводятся в систему координат reportlab только при отрисовке.
"""

import logging
from datetime import date
from io import BytesIO
from typing import Callable, List, NamedTuple, Optional, Tuple

from PIL import Image
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from .exceptions import RenderError
from .models import CertificateData, format_date

logger = logging.getLogger(__name__)

PAGE_WIDTH_MM = 297
PAGE_HEIGHT_MM = 210

# Поля текста: по 40 мм с каждой стороны
TEXT_SIDE_MARGIN_MM = 40
TEXT_WIDTH_MM = PAGE_WIDTH_MM - 2 * TEXT_SIDE_MARGIN_MM
LINE_HEIGHT_MM = 5

TITLE_Y_MM = 30
FLOW_START_Y_MM = 40
EMBLEM_MAX_WIDTH_MM = 50
EMBLEM_MAX_HEIGHT_MM = 50
EMBLEM_GAP_MM = 10
SIGNATURE_HALF_WIDTH_MM = 30

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
BODY_FONT_SIZE = 12

PRIMARY_COLOR = (0, 110, 253)
INNER_BORDER_COLOR = (220, 220, 220)
TEXT_COLOR = (0, 0, 0)
MUTED_COLOR = (100, 100, 100)

ROLE_SPEAKER = "Ponente"
ROLE_ORGANIZER = "Organizador"
ROLE_ATTENDEE = "Asistente"

TITLE_TEXT = "CERTIFICADO DE PARTICIPACIÓN"
LEAD_IN_TEXT = "Se certifica que:"
SIGNATURE_TEXT = "Firma del Organizador"
DEFAULT_VALIDATION_URL = "www.nuestroevento.com/validar"


class TextBlock(NamedTuple):
    text: str
    y: float
    font: str
    size: int
    color: Tuple[int, int, int]


class RuleBlock(NamedTuple):
    x1: float
    x2: float
    y: float


class EmblemBlock(NamedTuple):
    x: float
    y: float
    width: float
    height: float


class CertificateLayout(NamedTuple):
    """Результат раскладки: блоки с вычисленными позициями."""
    texts: List[TextBlock]
    rules: List[RuleBlock]
    emblem: Optional[EmblemBlock]
    paragraph: str
    paragraph_lines: List[str]
    footer: str


class LayoutCursor:
    """Текущая вертикальная позиция потока раскладки (мм от верха)."""

    def __init__(self, y: float):
        self.y = y

    def at(self, offset: float) -> float:
        """Позиция со смещением от курсора, курсор не сдвигается."""
        return self.y + offset

    def advance(self, delta: float) -> float:
        """Сдвигает курсор и возвращает новую позицию."""
        self.y += delta
        return self.y


def role_paragraph(data: CertificateData) -> str:
    """
    Текст сертификата в зависимости от роли участника.

    Неизвестная роль получает текст для роли "Asistente".
    """
    if data.participant_role == ROLE_SPEAKER:
        return (
            f'ha participado como PONENTE en el evento "{data.event_name}", '
            f'presentando su conocimiento y experiencia durante {data.duration_text} horas.'
        )
    elif data.participant_role == ROLE_ORGANIZER:
        return (
            f'ha participado como ORGANIZADOR en el evento "{data.event_name}", '
            f'gestionando y coordinando actividades durante {data.duration_text} horas.'
        )
    else:
        return (
            f'ha participado como ASISTENTE en el evento "{data.event_name}", '
            f'completando satisfactoriamente {data.duration_text} horas de formación.'
        )


def fit_emblem(width: float, height: float,
               max_width: float = EMBLEM_MAX_WIDTH_MM,
               max_height: float = EMBLEM_MAX_HEIGHT_MM) -> Tuple[float, float]:
    """
    Масштабирует эмблему в рамку с сохранением пропорций.

    Сначала ограничивается ширина, затем высота полученного результата.
    """
    if width > max_width:
        ratio = max_width / width
        width = max_width
        height = height * ratio

    if height > max_height:
        ratio = max_height / height
        height = max_height
        width = width * ratio

    return width, height


def wrap_text(text: str, width_mm: float = TEXT_WIDTH_MM,
              font: str = FONT_REGULAR, size: int = BODY_FONT_SIZE) -> List[str]:
    """Разбивает текст на строки по ширине области текста."""
    return simpleSplit(text, font, size, width_mm * mm)


def decode_emblem(emblem: Optional[bytes]) -> Optional[Image.Image]:
    """
    Декодирует изображение эмблемы.

    Returns:
        Изображение или None, если эмблемы нет или ее не удалось прочитать
    """
    if not emblem:
        return None

    try:
        image = Image.open(BytesIO(emblem))
        image.load()
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning(f"Не удалось прочитать эмблему, сертификат будет без нее: {e}")
        return None

    if image.mode not in ("RGB", "RGBA", "L"):
        image = image.convert("RGBA")
    return image


class CertificateComposer:
    """Формирует одностраничный PDF сертификата."""

    def __init__(self, validation_url: str = DEFAULT_VALIDATION_URL,
                 clock: Callable[[], date] = date.today):
        """
        Args:
            validation_url: Адрес для проверки сертификата в нижнем колонтитуле
            clock: Источник текущей даты (дата выдачи)
        """
        self.validation_url = validation_url
        self.clock = clock

    def compose(self, data: CertificateData, emblem: Optional[bytes] = None) -> bytes:
        """
        Формирует PDF документ сертификата.

        Args:
            data: Проверенные данные сертификата
            emblem: Байты изображения эмблемы (необязательно)

        Returns:
            bytes: PDF документ

        Raises:
            RenderError: При ошибке формирования документа
        """
        image = decode_emblem(emblem)
        layout = self.plan(data, image.size if image else None)

        try:
            return self._render(layout, image)
        except Exception as e:
            logger.error(f"Ошибка формирования PDF сертификата {data.id}: {e}")
            raise RenderError(f"Ошибка формирования PDF: {e}") from e

    def plan(self, data: CertificateData,
             emblem_size: Optional[Tuple[float, float]] = None) -> CertificateLayout:
        """
        Вычисляет раскладку страницы.

        Args:
            data: Данные сертификата
            emblem_size: Исходные размеры эмблемы (ширина, высота) или None

        Returns:
            CertificateLayout: Блоки с позициями в мм от верхнего края
        """
        center = PAGE_WIDTH_MM / 2
        texts = [TextBlock(TITLE_TEXT, TITLE_Y_MM, FONT_BOLD, 24, PRIMARY_COLOR)]
        rules = []
        cursor = LayoutCursor(FLOW_START_Y_MM)

        emblem = None
        if emblem_size:
            width, height = fit_emblem(*emblem_size)
            emblem = EmblemBlock(center - width / 2, cursor.y, width, height)
            cursor.advance(height + EMBLEM_GAP_MM)

        texts.append(TextBlock(LEAD_IN_TEXT, cursor.at(10), FONT_REGULAR, BODY_FONT_SIZE, TEXT_COLOR))
        texts.append(TextBlock(data.participant_name, cursor.at(20), FONT_BOLD, 18, TEXT_COLOR))

        paragraph = role_paragraph(data)
        lines = wrap_text(paragraph)
        for index, line in enumerate(lines):
            texts.append(TextBlock(
                line, cursor.at(30 + index * LINE_HEIGHT_MM), FONT_REGULAR, BODY_FONT_SIZE, TEXT_COLOR
            ))

        y = cursor.advance(35 + len(lines) * LINE_HEIGHT_MM)
        texts.append(TextBlock(
            f"Realizado el {data.event_date_text} en {data.event_location}.",
            y, FONT_REGULAR, BODY_FONT_SIZE, TEXT_COLOR
        ))

        y = cursor.advance(30)
        rules.append(RuleBlock(center - SIGNATURE_HALF_WIDTH_MM, center + SIGNATURE_HALF_WIDTH_MM, y))
        texts.append(TextBlock(SIGNATURE_TEXT, cursor.advance(5), FONT_REGULAR, BODY_FONT_SIZE, TEXT_COLOR))

        footer = f"ID: {data.id} | Fecha de emisión: {format_date(self.clock())}"
        texts.append(TextBlock(footer, cursor.advance(20), FONT_REGULAR, 8, MUTED_COLOR))
        texts.append(TextBlock(
            f"Este certificado puede ser validado en {self.validation_url}",
            cursor.advance(5), FONT_REGULAR, 8, MUTED_COLOR
        ))

        return CertificateLayout(
            texts=texts,
            rules=rules,
            emblem=emblem,
            paragraph=paragraph,
            paragraph_lines=lines,
            footer=footer
        )

    def _render(self, layout: CertificateLayout, image: Optional[Image.Image]) -> bytes:
        buffer = BytesIO()
        page_width, page_height = landscape(A4)
        # invariant=1 убирает дату создания из PDF, вывод детерминирован
        pdf = canvas.Canvas(buffer, pagesize=(page_width, page_height), invariant=1)
        pdf.setTitle(TITLE_TEXT)

        def to_pdf_y(y_mm: float) -> float:
            return page_height - y_mm * mm

        # Внешняя декоративная рамка и внутренняя тонкая рамка
        pdf.setStrokeColorRGB(*_rgb(PRIMARY_COLOR))
        pdf.setLineWidth(1 * mm)
        pdf.rect(10 * mm, 10 * mm, page_width - 20 * mm, page_height - 20 * mm)
        pdf.setStrokeColorRGB(*_rgb(INNER_BORDER_COLOR))
        pdf.setLineWidth(0.5 * mm)
        pdf.rect(15 * mm, 15 * mm, page_width - 30 * mm, page_height - 30 * mm)

        if layout.emblem and image is not None:
            emblem = layout.emblem
            pdf.drawImage(
                ImageReader(image),
                emblem.x * mm,
                to_pdf_y(emblem.y + emblem.height),
                width=emblem.width * mm,
                height=emblem.height * mm,
                mask='auto'
            )

        for block in layout.texts:
            pdf.setFont(block.font, block.size)
            pdf.setFillColorRGB(*_rgb(block.color))
            pdf.drawCentredString(page_width / 2, to_pdf_y(block.y), block.text)

        pdf.setStrokeColorRGB(*_rgb(TEXT_COLOR))
        pdf.setLineWidth(0.3 * mm)
        for rule in layout.rules:
            pdf.line(rule.x1 * mm, to_pdf_y(rule.y), rule.x2 * mm, to_pdf_y(rule.y))

        pdf.showPage()
        pdf.save()
        return buffer.getvalue()


def _rgb(color: Tuple[int, int, int]) -> Tuple[float, float, float]:
    return tuple(channel / 255 for channel in color)
