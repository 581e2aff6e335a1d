"""Bookmark de un candidato (startup o inversor) guardado por un usuario."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class SavedMatch(BaseModel):
    saved_id: Optional[int] = Field(None, description="ID asignado por el store")
    user_id: int = Field(..., description="Usuario que guarda")
    target_user_id: int = Field(..., description="Usuario guardado")
    target_type: str = Field(..., description="'Startup' o 'Investor'")
    notes: Optional[str] = Field(None, max_length=1000)
    saved_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_db_dict(self) -> dict:
        return self.model_dump(exclude={"saved_id"})
