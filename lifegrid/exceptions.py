"""
Custom exceptions for the LifeGrid backend.
Provides specific exception types for the HTTP layer to map onto status codes.
"""
from uuid import UUID


class LifeGridException(Exception):
    """Base exception for LifeGrid application"""
    pass


class SprintNotFoundException(LifeGridException):
    """Raised when a sprint is not found"""
    def __init__(self, sprint_id: UUID):
        self.sprint_id = sprint_id
        super().__init__(f"Sprint with ID {sprint_id} not found")


class EffortNotFoundException(LifeGridException):
    """Raised when an effort is not found"""
    def __init__(self, effort_id: UUID):
        self.effort_id = effort_id
        super().__init__(f"Effort with ID {effort_id} not found")


class GoalNotFoundException(LifeGridException):
    """Raised when an effort references a goal no sprint owns"""
    def __init__(self, goal_id: UUID):
        self.goal_id = goal_id
        super().__init__(f"Goal with ID {goal_id} not found")


class ValidationException(LifeGridException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")
