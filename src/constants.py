"""
Shared constants used across multiple modules.
Single source of truth for category keys and equipment classification.
"""

# Muscle groups the ExerciseDB catalog is partitioned by, in import order.
MUSCLE_CATEGORIES = [
    "abductors",
    "abs",
    "adductors",
    "biceps",
    "calves",
    "cardiovascular system",
    "delts",
    "forearms",
    "glutes",
    "hamstrings",
    "lats",
    "levator scapulae",
    "pectorals",
    "quads",
    "serratus anterior",
    "spine",
    "traps",
    "triceps",
    "upper back",
]

# Stored in exercises.category
CATEGORY_STRENGTH = 1
CATEGORY_BODYWEIGHT = 2
CATEGORY_CARDIO = 3

CATEGORY_NAMES = {
    CATEGORY_STRENGTH: "Strength Training",
    CATEGORY_BODYWEIGHT: "Bodyweight",
    CATEGORY_CARDIO: "Cardio",
}
UNKNOWN_CATEGORY_NAME = "Unknown"

# Equipment keywords for category detection (lower-case)
CARDIO_EQUIPMENT = {
    "elliptical machine", "treadmill", "stationary bike",
    "stepmill machine", "upper body ergometer",
}
STRENGTH_EQUIPMENT = {
    "barbell", "dumbbell", "kettlebell", "leverage machine",
    "smith machine", "cable", "band", "weighted", "ez barbell",
    "olympic barbell", "rope",
}

# Equipment considered beginner friendly
BEGINNER_EQUIPMENT = ("body weight", "dumbbell", "resistance band")
