from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel, Column, DateTime, Text

from models.transcript import _new_id, _utcnow


class Summary(SQLModel, table=True):
    __tablename__ = "summaries"

    id: str = Field(default_factory=_new_id, primary_key=True)
    transcript_id: str = Field(foreign_key="transcripts.id", index=True)

    # Free-text formatting instructions supplied by the user
    custom_prompt: str = Field(sa_column=Column(Text, nullable=False))
    # Model output, never overwritten once stored
    generated_summary: str = Field(sa_column=Column(Text, nullable=False))
    edited_summary: Optional[str] = Field(default=None, sa_column=Column(Text))

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        default_factory=_utcnow,
    )
    updated_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        default_factory=_utcnow,
    )

    @property
    def display_text(self) -> str:
        """The user's edit when there is one, otherwise the generated text."""
        return self.edited_summary or self.generated_summary
