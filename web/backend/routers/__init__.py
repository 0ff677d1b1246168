"""API route handlers."""

from .assignments import router as assignments_router
from .positions import router as positions_router
