"""
Reference data - IDEA disability categories and behavior vocabulary.

Both tables are read-only to end users and populated by the seeder.
"""

from sqlalchemy.orm import Session

from classroom_observations.db.models import BehaviorCategory, IdeaCategory


IDEA_CATEGORIES = [
    {
        "code": "AU",
        "name": "Autism",
        "description": "Autism spectrum disorder affecting social communication and behavior",
    },
    {
        "code": "DB",
        "name": "Deaf-Blindness",
        "description": "Concomitant hearing and visual impairments",
    },
    {
        "code": "DF",
        "name": "Deafness",
        "description": "Hearing impairment severe enough to impair processing linguistic information through hearing",
    },
    {
        "code": "ED",
        "name": "Emotional Disturbance",
        "description": "Emotional or behavioral difficulties that affect educational performance",
    },
    {
        "code": "HI",
        "name": "Hearing Impairment",
        "description": "Hearing impairment, permanent or fluctuating, that is not included under deafness",
    },
    {
        "code": "ID",
        "name": "Intellectual Disability",
        "description": "Significantly below average intellectual functioning with deficits in adaptive behavior",
    },
    {
        "code": "MD",
        "name": "Multiple Disabilities",
        "description": "Concomitant impairments whose combination causes severe educational needs",
    },
    {
        "code": "OI",
        "name": "Orthopedic Impairment",
        "description": "Severe orthopedic impairment that adversely affects educational performance",
    },
    {
        "code": "OHI",
        "name": "Other Health Impairment",
        "description": "Limited strength, vitality or alertness due to chronic or acute health problems",
    },
    {
        "code": "SLD",
        "name": "Specific Learning Disability",
        "description": "Difficulty in learning and using academic skills",
    },
    {
        "code": "SLI",
        "name": "Speech or Language Impairment",
        "description": "Communication disorders affecting speech or language",
    },
    {
        "code": "TBI",
        "name": "Traumatic Brain Injury",
        "description": "Acquired injury to the brain caused by external physical force",
    },
    {
        "code": "VI",
        "name": "Visual Impairment",
        "description": "Visual impairment, including blindness, that adversely affects educational performance",
    },
]

BEHAVIOR_CATEGORIES = [
    {"name": "On Task", "domain": "academic", "is_positive": True, "color": "#22c55e",
     "description": "Attending to and working on the assigned task"},
    {"name": "Engaged", "domain": "academic", "is_positive": True, "color": "#16a34a",
     "description": "Actively participating in instruction or group work"},
    {"name": "Appropriate Peer Interaction", "domain": "social", "is_positive": True,
     "color": "#3b82f6", "description": "Positive communication with classmates"},
    {"name": "Correct Response", "domain": "academic", "is_positive": True, "color": "#06b6d4",
     "description": "Answered or completed work accurately"},
    {"name": "Transition", "domain": "adaptive", "is_positive": True, "color": "#a855f7",
     "description": "Moving between activities, locations or materials"},
    {"name": "Off Task", "domain": "academic", "is_positive": False, "color": "#f59e0b",
     "description": "Not attending to the assigned task"},
    {"name": "Disruptive", "domain": "behavioral", "is_positive": False, "color": "#ef4444",
     "description": "Behavior that interrupts instruction or peers"},
    {"name": "Refusal", "domain": "behavioral", "is_positive": False, "color": "#dc2626",
     "description": "Declining to follow a direction or complete work"},
    {"name": "Needed Redirection", "domain": "behavioral", "is_positive": False,
     "color": "#ec4899", "description": "Required an adult prompt to return to task"},
]


def list_idea_categories(db: Session) -> list[IdeaCategory]:
    return db.query(IdeaCategory).order_by(IdeaCategory.code).all()


def list_behavior_categories(db: Session) -> list[BehaviorCategory]:
    return db.query(BehaviorCategory).order_by(BehaviorCategory.name).all()


def seed_idea_categories(db: Session) -> int:
    """
    Seed the 13 IDEA categories.

    Idempotent: skips categories whose code already exists.

    Returns:
        Number of categories created.
    """
    created_count = 0
    for category_data in IDEA_CATEGORIES:
        existing = (
            db.query(IdeaCategory)
            .filter(IdeaCategory.code == category_data["code"])
            .first()
        )
        if existing:
            continue
        db.add(IdeaCategory(**category_data))
        created_count += 1

    if created_count > 0:
        db.flush()
    return created_count


def seed_behavior_categories(db: Session) -> int:
    """Seed the behavior vocabulary. Idempotent by name."""
    created_count = 0
    for category_data in BEHAVIOR_CATEGORIES:
        existing = (
            db.query(BehaviorCategory)
            .filter(BehaviorCategory.name == category_data["name"])
            .first()
        )
        if existing:
            continue
        db.add(BehaviorCategory(**category_data))
        created_count += 1

    if created_count > 0:
        db.flush()
    return created_count


def seed_reference_data(db: Session) -> dict:
    """Seed all reference tables and commit."""
    result = {
        "idea_categories": seed_idea_categories(db),
        "behavior_categories": seed_behavior_categories(db),
    }
    db.commit()
    return result
