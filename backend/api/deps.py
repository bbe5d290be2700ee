"""
FastAPI dependencies for the collaborators built at startup.

`main.create_app()` puts them on `app.state`; tests swap them there or via
`app.dependency_overrides`.
"""

from fastapi import Request

from services.email_dispatch import EmailDispatcher
from services.storage import Storage
from services.summarizer import Summarizer


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_summarizer(request: Request) -> Summarizer:
    return request.app.state.summarizer


def get_email_dispatcher(request: Request) -> EmailDispatcher:
    return request.app.state.email_dispatcher
