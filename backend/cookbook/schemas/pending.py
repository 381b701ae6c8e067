"""
Family Cookbook Backend — Pending Submission Schemas
======================================================

What:  Response model for the moderation queue endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class PendingRecipeResponse(BaseModel):
    """
    What:  One uploaded submission.
    Who:   GET /api/pending-recipes (list) and GET /api/pending-recipes/{id}.

    raw_text is returned in full so the moderator can copy from it.
    """
    id: int
    title: str
    raw_text: str = Field(description="Text extracted from the uploaded document")
    file_name: str = Field(description="Original name of the uploaded file")
    submitter_name: str
    status: str = Field(description="pending or published")
    created_at: datetime

    model_config = {"from_attributes": True}
