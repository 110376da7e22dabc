"""Tests for text and PDF duty sheets."""

from datetime import date, datetime, timedelta

import pytest

from fieldops.domain.models import (
    CurrentConditions,
    HourBlock,
    OperationTask,
    RouteSequence,
    ScheduleInstance,
    WeatherSnapshot,
    WorkerRoute,
)
from fieldops.output.pdf_generator import PDFGenerator
from fieldops.output.sheet_generator import DutySheet, DutySheetGenerator

MONDAY = date(2024, 1, 15)


@pytest.fixture
def sheet():
    start = datetime(2024, 1, 15, 7, 0)
    instance = ScheduleInstance(
        id="trash_1", routine_id="trash", building_id="10",
        start_time=start, end_time=start + timedelta(minutes=60),
        category="Sanitation", requires_photo=True,
        title="Trash Room", building_name="12 West 18th",
    )
    route = WorkerRoute(
        id="kevin_mon",
        worker_id="4",
        day_of_week=0,
        route_name="Monday Morning",
        sequences=(
            RouteSequence(
                id="open", building_id="10", arrival_time=datetime(2024, 1, 15, 6, 0),
                estimated_duration_minutes=30, is_flexible=False,
            ),
            RouteSequence(
                id="sweep", building_id="10", arrival_time=datetime(2024, 1, 15, 6, 30),
                estimated_duration_minutes=45, dependencies=frozenset({"open"}),
                operations=(OperationTask(id="op", name="Sweep", is_weather_sensitive=True),),
            ),
        ),
    )
    weather = WeatherSnapshot(
        current=CurrentConditions(temp_f=41.0, condition="Rain", wind_mph=12.0),
        hourly=(HourBlock(time=start, precip_prob=0.8),),
    )
    return DutySheet(
        worker_id="4",
        schedule_date=MONDAY,
        instances=[instance],
        route=route,
        weather=weather,
    )


class TestDutySheetGenerator:
    """Tests for DutySheetGenerator."""

    def test_generate_to_string(self, sheet):
        content = DutySheetGenerator().generate_to_string(sheet)

        assert "DUTY SHEET - worker 4 - Monday, January 15, 2024" in content
        assert "Weather: Rain, 41F, wind 12 mph, rain (4h) 80%" in content
        assert "Trash Room" in content
        assert "[photo]" in content
        assert "ROUTE: Monday Morning" in content
        assert " 1.* 06:00" in content
        assert "outdoor after open" in content

    def test_empty_sheet(self):
        content = DutySheetGenerator().generate_to_string(DutySheet(worker_id="4", schedule_date=MONDAY))

        assert "No duties right now." in content
        assert "ROUTE" not in content

    def test_generate_writes_file(self, sheet, tmp_path):
        output = tmp_path / "sheet.txt"

        content = DutySheetGenerator().generate(sheet, output)

        assert output.read_text() == content


class TestPDFGenerator:
    """Tests for PDFGenerator."""

    def test_generate_to_buffer(self, sheet):
        pytest.importorskip("reportlab")

        buffer = PDFGenerator().generate_to_buffer(sheet)

        assert buffer.read(5) == b"%PDF-"

    def test_generate_file(self, sheet, tmp_path):
        pytest.importorskip("reportlab")
        output = tmp_path / "sheet.pdf"

        PDFGenerator().generate(sheet, output)

        assert output.stat().st_size > 0

    def test_many_rows_span_pages(self, sheet):
        pytest.importorskip("reportlab")
        sheet.instances = sheet.instances * 80

        buffer = PDFGenerator().generate_to_buffer(sheet)

        assert buffer.getvalue().startswith(b"%PDF-")
