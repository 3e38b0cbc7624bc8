"""
Seed script for the default exercise catalogue and a starter program.

Run with:
    python -m yoked.scripts.seed_catalog
    python -m yoked.scripts.seed_catalog --clear  # Replace a catalogue nobody is enrolled in
"""

import asyncio

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from yoked.config.database import AsyncSessionLocal, init_db
from yoked.core.exceptions import StateConflictError
from yoked.domains.programs.models import Exercise, Program, ProgramWorkout, ProgramWorkoutExercise, UserProgram
from yoked.domains.programs.service import ProgramService

logger = structlog.get_logger(__name__)


EXERCISES = [
    {
        "name": "Barbell Bench Press",
        "slug": "bench_press",
        "primary_muscle_group": "chest",
        "equipment": "barbell",
        "description": "Compound press for chest, front delts and triceps.",
        "load_modifier": 1.0,
    },
    {
        "name": "Standing Shoulder Press",
        "slug": "shoulder_press",
        "primary_muscle_group": "shoulders",
        "equipment": "barbell",
        "description": "Overhead press from the front rack position.",
        "load_modifier": 0.8,
    },
    {
        "name": "Back Squat",
        "slug": "squat",
        "primary_muscle_group": "quadriceps",
        "equipment": "barbell",
        "description": "High-bar or low-bar squat to at least parallel.",
        "load_modifier": 1.2,
    },
    {
        "name": "Conventional Deadlift",
        "slug": "deadlift",
        "primary_muscle_group": "back",
        "equipment": "barbell",
        "description": "Hip hinge pulling the bar from the floor to lockout.",
        "load_modifier": 1.1,
    },
    {
        "name": "Dumbbell Bicep Curl",
        "slug": "bicep_curl",
        "primary_muscle_group": "biceps",
        "equipment": "dumbbell",
        "description": "Supinated curl, elbows fixed at the sides.",
        "load_modifier": 0.5,
    },
    {
        "name": "Barbell Row",
        "slug": "barbell_row",
        "primary_muscle_group": "back",
        "equipment": "barbell",
        "description": "Bent-over row to the lower chest.",
        "load_modifier": 0.8,
    },
    {
        "name": "Romanian Deadlift",
        "slug": "romanian_deadlift",
        "primary_muscle_group": "hamstrings",
        "equipment": "barbell",
        "description": "Stiff-leg hinge emphasising the hamstrings.",
        "load_modifier": 0.9,
    },
    {
        "name": "Lat Pulldown",
        "slug": "lat_pulldown",
        "primary_muscle_group": "back",
        "equipment": "cable",
        "description": "Vertical pull to the upper chest.",
        "load_modifier": 0.7,
    },
    {
        "name": "Triceps Pushdown",
        "slug": "triceps_pushdown",
        "primary_muscle_group": "triceps",
        "equipment": "cable",
        "description": "Elbow extension on the cable stack.",
        "load_modifier": 0.4,
    },
    {
        "name": "Leg Press",
        "slug": "leg_press",
        "primary_muscle_group": "quadriceps",
        "equipment": "machine",
        "description": "Sled leg press through full knee range.",
        "load_modifier": 1.8,
    },
]

# Starter program: (day, name, [(slug, sets, reps, target_rir)])
STARTER_PROGRAM = {
    "name": "Full Body Foundations",
    "description": "Three full-body sessions per week built on the main barbell lifts.",
    "goal": "muscle_gain",
    "estimated_weeks": 8,
    "workouts": [
        (1, "Day 1: Squat & Press", [
            ("squat", 3, 8, 2),
            ("bench_press", 3, 8, 2),
            ("barbell_row", 3, 10, 2),
            ("bicep_curl", 2, 12, 1),
        ]),
        (3, "Day 2: Hinge & Overhead", [
            ("deadlift", 3, 5, 2),
            ("shoulder_press", 3, 8, 2),
            ("lat_pulldown", 3, 10, 2),
            ("triceps_pushdown", 2, 12, 1),
        ]),
        (5, "Day 3: Volume", [
            ("leg_press", 3, 12, 2),
            ("bench_press", 3, 10, 2),
            ("romanian_deadlift", 3, 10, 2),
            ("bicep_curl", 2, 15, 1),
        ]),
    ],
}


async def clear_catalog(session: AsyncSession) -> None:
    """Remove every program template and exercise.

    Raises:
        StateConflictError: If any user has ever enrolled in a program
    """
    enrolments = await session.scalar(select(func.count(UserProgram.id)))
    if enrolments:
        raise StateConflictError(
            f"Catalogue is referenced by {enrolments} enrolment(s) and cannot be cleared"
        )

    logger.info("clearing_existing_catalog")
    await session.execute(delete(ProgramWorkoutExercise))
    await session.execute(delete(ProgramWorkout))
    await session.execute(delete(Program))
    await session.execute(delete(Exercise))


async def seed_catalog(session: AsyncSession, clear_existing: bool = False) -> int:
    """Seed the exercise catalogue and the starter program in one transaction.

    Returns:
        Number of exercises inserted (0 when the catalogue already exists)

    Raises:
        StateConflictError: If ``clear_existing`` is set and users are enrolled
    """
    if clear_existing:
        await clear_catalog(session)
    else:
        count = await session.scalar(select(func.count(Exercise.id)))
        if count:
            logger.info("catalog_already_exists", existing_count=count, hint="Use --clear to replace it")
            return 0

    by_slug: dict[str, Exercise] = {}
    for exercise_data in EXERCISES:
        exercise = Exercise(**exercise_data)
        session.add(exercise)
        by_slug[exercise.slug] = exercise
    await session.flush()

    workouts = []
    for day, name, exercises in STARTER_PROGRAM["workouts"]:
        workouts.append({
            "name": name,
            "day_of_week": day,
            "exercises": [
                {
                    "exercise_id": by_slug[slug].id,
                    "sets": sets,
                    "reps": reps,
                    "target_rir": rir,
                    "exercise_order": order,
                }
                for order, (slug, sets, reps, rir) in enumerate(exercises, start=1)
            ],
        })

    # Commits the exercises together with the program
    program = await ProgramService(session).create_program(
        name=STARTER_PROGRAM["name"],
        description=STARTER_PROGRAM["description"],
        goal=STARTER_PROGRAM["goal"],
        estimated_weeks=STARTER_PROGRAM["estimated_weeks"],
        workouts=workouts,
    )
    logger.info("starter_program_seeded", program_id=str(program.id))

    return len(by_slug)


async def main():
    """Main function to run the seed."""
    import argparse

    parser = argparse.ArgumentParser(description="Seed exercise catalogue and starter program")
    parser.add_argument("--clear", action="store_true", help="Clear the existing catalogue first")
    args = parser.parse_args()

    await init_db()
    async with AsyncSessionLocal() as session:
        count = await seed_catalog(session, clear_existing=args.clear)

    if count > 0:
        logger.info("catalog_seeded_successfully", count=count)
    else:
        logger.info("no_exercises_seeded")


if __name__ == "__main__":
    asyncio.run(main())
