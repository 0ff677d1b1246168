"""Business logic services."""

from .assignment_service import AssignmentService, build_assign_response
from .suggestion_service import SuggestionService
