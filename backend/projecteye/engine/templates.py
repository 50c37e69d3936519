"""Standard construction phase templates."""
from dataclasses import dataclass
from datetime import date, timedelta

from projecteye.exceptions import InvalidInputError
from projecteye.models.project import ProjectType


@dataclass(frozen=True)
class PhaseTemplate:
    name: str
    duration_days: int
    order: int


@dataclass(frozen=True)
class PlannedPhase:
    name: str
    planned_start: date
    planned_end: date
    order: int


MILESTONE_TEMPLATES: dict[ProjectType, tuple[PhaseTemplate, ...]] = {
    ProjectType.RESIDENTIAL: (
        PhaseTemplate("Site Preparation", 7, 1),
        PhaseTemplate("Foundation", 21, 2),
        PhaseTemplate("Structure", 45, 3),
        PhaseTemplate("Roofing", 14, 4),
        PhaseTemplate("External Walls", 21, 5),
        PhaseTemplate("MEP First Fix", 21, 6),
        PhaseTemplate("Internal Walls & Plastering", 30, 7),
        PhaseTemplate("Flooring", 21, 8),
        PhaseTemplate("MEP Second Fix", 14, 9),
        PhaseTemplate("Painting", 21, 10),
        PhaseTemplate("Final Finishing", 14, 11),
        PhaseTemplate("Handover", 7, 12),
    ),
    ProjectType.COMMERCIAL: (
        PhaseTemplate("Site Preparation", 14, 1),
        PhaseTemplate("Foundation & Basement", 45, 2),
        PhaseTemplate("Structural Frame", 90, 3),
        PhaseTemplate("External Envelope", 60, 4),
        PhaseTemplate("MEP Installation", 90, 5),
        PhaseTemplate("Interior Fit-out", 60, 6),
        PhaseTemplate("Testing & Commissioning", 30, 7),
        PhaseTemplate("External Works", 30, 8),
        PhaseTemplate("Final Inspection & Handover", 14, 9),
    ),
}


def expand_template(project_type: ProjectType | str, start_date: date) -> list[PlannedPhase]:
    """Lay the template's phases end to end from start_date, one day apart."""
    try:
        templates = MILESTONE_TEMPLATES[ProjectType(project_type)]
    except (KeyError, ValueError):
        raise InvalidInputError(f"No milestone template for project type {project_type}")

    phases = []
    current = start_date
    for template in templates:
        planned_end = current + timedelta(days=template.duration_days)
        phases.append(PlannedPhase(
            name=template.name,
            planned_start=current,
            planned_end=planned_end,
            order=template.order,
        ))
        current = planned_end + timedelta(days=1)
    return phases
