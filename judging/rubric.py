"""
Rubric catalog and loader
"""
import yaml
from pathlib import Path
from typing import List
from judging.models import RubricCriteria


# Observed rubric: 4 criteria x 25 points = 100
DEFAULT_RUBRIC: List[RubricCriteria] = [
    RubricCriteria(
        id="communication",
        name="Effective Communication",
        short_name="Communication",
        description="Was the problem urgent, the solution convincing, and the impact tangible?",
        guiding_question="Notes on clarity and messaging...",
        max_score=25,
        display_order=1,
    ),
    RubricCriteria(
        id="funding",
        name="Would Fund/Buy Solution",
        short_name="Funding",
        description="Consider technical feasibility, commercial viability, and novelty of the approach.",
        guiding_question="Thoughts on feasibility and potential...",
        max_score=25,
        display_order=2,
    ),
    RubricCriteria(
        id="presentation",
        name="Presentation Quality",
        short_name="Presentation",
        description="Evaluate the demo assets, storytelling, and overall delivery.",
        guiding_question="Observations on delivery and engagement...",
        max_score=25,
        display_order=3,
    ),
    RubricCriteria(
        id="cohesion",
        name="Team Cohesion",
        short_name="Cohesion",
        description="Reflect on the pitch strength, Q&A performance, and your gut confidence.",
        guiding_question="General impressions and final thoughts...",
        max_score=25,
        display_order=4,
    ),
]


def validate_rubric(criteria: List[RubricCriteria]) -> List[RubricCriteria]:
    """
    Check a rubric is usable and return it sorted by display order

    Raises:
        ValueError: If the rubric is empty, has duplicate ids or a
            non-positive max_score
    """
    if not criteria:
        raise ValueError("Rubric must define at least one criterion")

    seen = set()
    for c in criteria:
        if c.id in seen:
            raise ValueError(f"Duplicate rubric criterion id: {c.id}")
        seen.add(c.id)
        if c.max_score <= 0:
            raise ValueError(f"Criterion {c.id}: max_score must be positive, got {c.max_score}")

    return sorted(criteria, key=lambda c: c.display_order)


def load_rubric(rubric_path: str) -> List[RubricCriteria]:
    """
    Load rubric criteria from a YAML file

    YAML format:
        - id: communication
          name: Effective Communication
          short_name: Communication
          max_score: 25
          display_order: 1

    Args:
        rubric_path: Path to YAML file

    Returns:
        List of RubricCriteria sorted by display_order

    Raises:
        FileNotFoundError: If file not found
        ValueError: If the rubric is invalid
    """
    path = Path(rubric_path)

    if not path.exists():
        raise FileNotFoundError(f"Rubric file not found: {rubric_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or []

    return validate_rubric([RubricCriteria(**item) for item in data])


def max_total(criteria: List[RubricCriteria]) -> int:
    """Highest judge total a rubric allows"""
    return sum(c.max_score for c in criteria)
