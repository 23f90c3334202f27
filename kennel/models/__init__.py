from .trainer import Trainer
from .dog import Dog, DogStatus
from .assignment import Assignment, AssignmentType
from .training_class import TrainingClass, ClassAssignment

__all__ = [
    "Trainer",
    "Dog", "DogStatus",
    "Assignment", "AssignmentType",
    "TrainingClass", "ClassAssignment",
]
