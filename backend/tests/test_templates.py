"""Template expansion from a project start date."""
from datetime import date

import pytest

from projecteye.engine.templates import MILESTONE_TEMPLATES, expand_template
from projecteye.exceptions import InvalidInputError
from projecteye.models.project import ProjectType


def test_residential_from_mid_january():
    phases = expand_template(ProjectType.RESIDENTIAL, date(2024, 1, 15))
    assert len(phases) == 12
    first, second = phases[0], phases[1]
    assert (first.name, first.order) == ("Site Preparation", 1)
    assert first.planned_start == date(2024, 1, 15)
    assert first.planned_end == date(2024, 1, 22)
    assert second.name == "Foundation"
    assert second.planned_start == date(2024, 1, 23)
    assert second.planned_end == date(2024, 2, 13)


def test_phases_are_back_to_back():
    phases = expand_template("COMMERCIAL", date(2024, 6, 1))
    assert [p.order for p in phases] == list(range(1, 10))
    for prev, nxt in zip(phases, phases[1:]):
        assert (nxt.planned_start - prev.planned_end).days == 1
    assert phases[-1].name == "Final Inspection & Handover"


def test_commercial_durations_match_table():
    phases = expand_template(ProjectType.COMMERCIAL, date(2024, 6, 1))
    durations = [(p.planned_end - p.planned_start).days for p in phases]
    assert durations == [t.duration_days for t in MILESTONE_TEMPLATES[ProjectType.COMMERCIAL]]


@pytest.mark.parametrize("project_type", [ProjectType.INDUSTRIAL, "BRIDGE"])
def test_unsupported_type(project_type):
    with pytest.raises(InvalidInputError):
        expand_template(project_type, date(2024, 1, 1))
