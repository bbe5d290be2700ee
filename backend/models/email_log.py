from datetime import datetime
from typing import List, Optional

from sqlmodel import Field, SQLModel, Column, DateTime, JSON, Text

from models.transcript import _new_id, _utcnow


class EmailLog(SQLModel, table=True):
    __tablename__ = "email_logs"

    id: str = Field(default_factory=_new_id, primary_key=True)
    summary_id: str = Field(foreign_key="summaries.id", index=True)

    recipients: List[str] = Field(sa_column=Column(JSON, nullable=False))
    subject: str
    message: Optional[str] = Field(default=None, sa_column=Column(Text))
    include_original: bool = False

    sent_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        default_factory=_utcnow,
    )
    status: str = "sent"
