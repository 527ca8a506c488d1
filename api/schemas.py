from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class SelectionModel(BaseModel):
    selected_theme: Optional[str] = None
    selected_barrier: Optional[str] = None
    search_text: str = ""
    selected_personas: List[str] = Field(default_factory=list)


class TransitionRequest(BaseModel):
    selection: SelectionModel = Field(default_factory=SelectionModel)
    value: Optional[str] = None


class TransitionResponse(BaseModel):
    selection: SelectionModel
    query: str
