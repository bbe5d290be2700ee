from models.transcript import Transcript
from models.summary import Summary
from models.email_log import EmailLog

__all__ = ["Transcript", "Summary", "EmailLog"]
