"""
app/validators package marker.
"""

from app.validators.entity_validator import EntityRowValidator

__all__ = [
    "EntityRowValidator",
]
