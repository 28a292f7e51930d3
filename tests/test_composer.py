"""
Тесты для формирования PDF сертификата
"""
import pytest
from datetime import date

from core.composer import (
    CertificateComposer, LEAD_IN_TEXT, LINE_HEIGHT_MM, decode_emblem,
    fit_emblem, role_paragraph
)
from core.exceptions import RenderError


def find_text(layout, prefix):
    """Первый текстовый блок, начинающийся с prefix"""
    return next(block for block in layout.texts if block.text.startswith(prefix))


class TestRoleParagraph:
    """Тесты текста по роли участника"""

    def test_speaker_paragraph(self, sample_data):
        """Тест текста для роли Ponente"""
        assert role_paragraph(sample_data) == (
            'ha participado como PONENTE en el evento "Taller de Rust", '
            'presentando su conocimiento y experiencia durante 8 horas.'
        )

    def test_organizer_paragraph(self, sample_data):
        """Тест текста для роли Organizador"""
        data = sample_data.model_copy(update={"participant_role": "Organizador"})

        assert role_paragraph(data) == (
            'ha participado como ORGANIZADOR en el evento "Taller de Rust", '
            'gestionando y coordinando actividades durante 8 horas.'
        )

    def test_attendee_paragraph(self, sample_data):
        """Тест текста для роли Asistente"""
        data = sample_data.model_copy(update={"participant_role": "Asistente"})

        assert role_paragraph(data) == (
            'ha participado como ASISTENTE en el evento "Taller de Rust", '
            'completando satisfactoriamente 8 horas de formación.'
        )

    @pytest.mark.parametrize("role", ["Invitado", "ponente", "ORGANIZADOR", "Moderador"])
    def test_unknown_role_uses_attendee_wording(self, sample_data, role):
        """Тест: неизвестная роль получает текст Asistente"""
        attendee = sample_data.model_copy(update={"participant_role": "Asistente"})
        other = sample_data.model_copy(update={"participant_role": role})

        assert role_paragraph(other) == role_paragraph(attendee)

    def test_duration_rendered_as_integer(self, sample_data):
        """Тест: продолжительность печатается целым числом"""
        data = sample_data.model_copy(update={"event_duration": 12.0})

        assert "durante 12 horas." in role_paragraph(data)


class TestFitEmblem:
    """Тесты масштабирования эмблемы"""

    @pytest.mark.parametrize("width,height", [
        (1000, 10), (10, 1000), (200, 100), (100, 200), (4000, 3000), (51, 50000)
    ])
    def test_scaled_emblem_fits_box(self, width, height):
        """Тест: эмблема не выходит за рамку и сохраняет пропорции"""
        scaled_width, scaled_height = fit_emblem(width, height)

        assert scaled_width <= 50
        assert scaled_height <= 50
        assert scaled_width / scaled_height == pytest.approx(width / height)

    def test_sequential_constraints(self):
        """Тест: сначала ограничивается ширина, затем высота"""
        assert fit_emblem(100, 200) == pytest.approx((25, 50))
        assert fit_emblem(200, 100) == pytest.approx((50, 25))

    def test_small_emblem_unchanged(self):
        """Тест: маленькая эмблема не увеличивается"""
        assert fit_emblem(30, 20) == (30, 20)


class TestLayout:
    """Тесты раскладки страницы"""

    @pytest.fixture
    def data(self, sample_data):
        return sample_data.model_copy(update={"id": "CERT-20240510-00001"})

    def test_footer_contains_id_and_issue_date(self, composer, data):
        """Тест: нижний колонтитул содержит ID и дату выдачи"""
        layout = composer.plan(data)

        assert layout.footer == "ID: CERT-20240510-00001 | Fecha de emisión: 16/10/2026"
        assert find_text(layout, "ID: ").text == layout.footer

    def test_issue_date_comes_from_clock(self, data):
        """Тест: дата выдачи берется из источника времени, а не из даты мероприятия"""
        composer = CertificateComposer(clock=lambda: date(2025, 1, 3))

        assert composer.plan(data).footer.endswith("Fecha de emisión: 03/01/2025")

    def test_completion_sentence(self, composer, data):
        """Тест: строка о проведении содержит дату и место"""
        layout = composer.plan(data)

        assert find_text(layout, "Realizado el").text == "Realizado el 10/05/2024 en Lima."

    def test_paragraph_lines_rebuild_paragraph(self, composer, data):
        """Тест: строки абзаца составляют исходный текст"""
        layout = composer.plan(data)

        assert " ".join(layout.paragraph_lines) == layout.paragraph

    def test_flow_advances_by_paragraph_lines(self, composer, data):
        """Тест: позиция блоков зависит от числа строк абзаца"""
        short = composer.plan(data)
        long_data = data.model_copy(update={"event_name": "Congreso Internacional " * 12})
        long = composer.plan(long_data)

        assert len(long.paragraph_lines) > len(short.paragraph_lines)

        for layout in (short, long):
            completion = find_text(layout, "Realizado el")
            footer = find_text(layout, "ID: ")
            assert completion.y == pytest.approx(75 + len(layout.paragraph_lines) * LINE_HEIGHT_MM)
            assert footer.y == pytest.approx(completion.y + 55)

    def test_emblem_shifts_flow(self, composer, data):
        """Тест: эмблема сдвигает поток на свою высоту и отступ"""
        without = composer.plan(data)
        with_emblem = composer.plan(data, (100, 100))

        assert without.emblem is None
        assert with_emblem.emblem.height == pytest.approx(50)
        assert with_emblem.emblem.y == 40
        assert with_emblem.emblem.x == pytest.approx(297 / 2 - 25)

        shift = find_text(with_emblem, LEAD_IN_TEXT).y - find_text(without, LEAD_IN_TEXT).y
        assert shift == pytest.approx(60)

    def test_participant_name_follows_lead_in(self, composer, data):
        """Тест: имя участника на 10 мм ниже вводной фразы"""
        layout = composer.plan(data)
        lead_in = find_text(layout, LEAD_IN_TEXT)
        name = find_text(layout, "Carlos Ruiz")

        assert name.y - lead_in.y == pytest.approx(10)
        assert name.font == "Helvetica-Bold"


class TestCompose:
    """Тесты формирования PDF"""

    def test_compose_without_emblem(self, composer, sample_data):
        """Тест формирования PDF без эмблемы"""
        document = composer.compose(sample_data)

        assert document.startswith(b"%PDF")

    def test_compose_with_emblem(self, composer, sample_data, png_emblem):
        """Тест формирования PDF с эмблемой"""
        document = composer.compose(sample_data, png_emblem)

        assert document.startswith(b"%PDF")
        assert len(document) > len(composer.compose(sample_data))

    def test_compose_is_deterministic(self, composer, sample_data):
        """Тест: одинаковые данные дают одинаковый документ"""
        assert composer.compose(sample_data) == composer.compose(sample_data)

    def test_broken_emblem_is_skipped(self, composer, sample_data):
        """Тест: нечитаемая эмблема не прерывает формирование"""
        document = composer.compose(sample_data, b"definitely not an image")

        assert document == composer.compose(sample_data)

    def test_decode_emblem(self, png_factory):
        """Тест декодирования эмблемы"""
        assert decode_emblem(None) is None
        assert decode_emblem(b"") is None
        assert decode_emblem(b"\x89PNG broken") is None
        assert decode_emblem(png_factory(20, 30)).size == (20, 30)

    def test_render_failure_raises_render_error(self, composer, sample_data, monkeypatch):
        """Тест: прочие ошибки отрисовки пробрасываются как RenderError"""
        def broken_render(layout, image):
            raise ValueError("broken canvas")

        monkeypatch.setattr(composer, "_render", broken_render)

        with pytest.raises(RenderError):
            composer.compose(sample_data)
