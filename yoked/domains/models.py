"""Central import of all domain models.

This file imports all models to ensure they are registered with SQLAlchemy's
metadata before any database operations (like creating tables).
"""

# Users domain
from yoked.domains.users.models import (
    ActivityLevel,
    FitnessGoal,
    Sex,
    User,
    UserPreferences,
)

# Programs domain
from yoked.domains.programs.models import (
    Exercise,
    Program,
    ProgramWorkout,
    ProgramWorkoutExercise,
    UserProgram,
    WorkoutExerciseLog,
    WorkoutSession,
)

# Custom workouts domain
from yoked.domains.workouts.models import (
    DayExercise,
    Workout,
    WorkoutDay,
    WorkoutType,
)

__all__ = [
    # Users
    "ActivityLevel",
    "FitnessGoal",
    "Sex",
    "User",
    "UserPreferences",
    # Programs
    "Exercise",
    "Program",
    "ProgramWorkout",
    "ProgramWorkoutExercise",
    "UserProgram",
    "WorkoutExerciseLog",
    "WorkoutSession",
    # Custom workouts
    "DayExercise",
    "Workout",
    "WorkoutDay",
    "WorkoutType",
]
