"""Plain-text duty sheets.

This module renders a worker's day as text:
- Expanded duties with times, buildings and flags
- Route visits in (possibly weather-optimized) order
- A short weather line when a snapshot is available
"""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional, Union

from fieldops.domain.models import ScheduleInstance, WeatherSnapshot, WorkerRoute


@dataclass
class DutySheet:
    """Everything printed for one worker and one day.

    Attributes:
        worker_id: Worker the sheet is for.
        schedule_date: Date of the sheet.
        instances: Duties for the day, in start order.
        route: Route for the day, if any.
        weather: Weather snapshot used for the route, if any.
    """

    worker_id: str
    schedule_date: date
    instances: list[ScheduleInstance] = field(default_factory=list)
    route: Optional[WorkerRoute] = None
    weather: Optional[WeatherSnapshot] = None


class DutySheetGenerator:
    """Generates text duty sheets.

    Example:
        >>> generator = DutySheetGenerator()
        >>> print(generator.generate_to_string(sheet))
    """

    def generate(self, sheet: DutySheet, output_path: Union[str, Path]) -> str:
        """Generate the sheet and save it to a file.

        Returns:
            The generated text content.
        """
        content = self.generate_to_string(sheet)
        Path(output_path).write_text(content)
        return content

    def generate_to_string(self, sheet: DutySheet) -> str:
        """Generate the sheet and return it as a string."""
        lines = []

        lines.append("=" * 72)
        lines.append(
            f"DUTY SHEET - worker {sheet.worker_id} - "
            f"{sheet.schedule_date.strftime('%A, %B %d, %Y')}"
        )
        lines.append("=" * 72)

        if sheet.weather is not None:
            current = sheet.weather.current
            rain = sheet.weather.max_precip_probability(4)
            lines.append(
                f"Weather: {current.condition}, {current.temp_f:.0f}F, "
                f"wind {current.wind_mph:.0f} mph, rain (4h) {rain:.0%}"
            )
        lines.append("")

        lines.append("-" * 72)
        lines.append("DUTIES")
        lines.append("-" * 72)
        if not sheet.instances:
            lines.append("No duties right now.")
        for instance in sheet.instances:
            flags = []
            if instance.weather_dependent:
                flags.append("weather")
            if instance.requires_photo:
                flags.append("photo")
            flag_str = f" [{', '.join(flags)}]" if flags else ""
            where = instance.building_name or f"building {instance.building_id}"
            lines.append(
                f"{instance.start_time.strftime('%a %H:%M')}-"
                f"{instance.end_time.strftime('%H:%M')}  "
                f"{instance.title[:30]:<30} {where[:24]:<24}{flag_str}"
            )
        lines.append("")

        if sheet.route is not None:
            lines.append("-" * 72)
            lines.append(f"ROUTE: {sheet.route.route_name or sheet.route.id}")
            lines.append("-" * 72)
            for i, sequence in enumerate(sheet.route.sequences, 1):
                marker = " " if sequence.is_flexible else "*"
                outdoor = " outdoor" if sequence.has_weather_sensitive_operation else ""
                deps = ""
                if sequence.dependencies:
                    deps = f" after {', '.join(sorted(sequence.dependencies))}"
                where = sequence.building_name or f"building {sequence.building_id}"
                lines.append(
                    f"{i:>2}.{marker} {sequence.arrival_time.strftime('%H:%M')} "
                    f"({sequence.estimated_duration_minutes:>3} min) "
                    f"{where[:28]:<28}{outdoor}{deps}"
                )
            lines.append("")
            lines.append("* = fixed position")

        return "\n".join(lines) + "\n"
