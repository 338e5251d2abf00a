"""
Request dependencies for the client handles built at start-up.

Handles live on app.state (see jobboard.main); tests swap them by passing
their own instances to create_app().
"""
from fastapi import Request

from jobboard.core.config import Settings
from jobboard.db.postgres import Database
from jobboard.services.openai_client import CompletionClient
from jobboard.services.storage_service import SupabaseStorageClient


def get_db(request: Request) -> Database:
    return request.app.state.database


def get_ai_client(request: Request) -> CompletionClient:
    return request.app.state.ai_client


def get_storage(request: Request) -> SupabaseStorageClient:
    return request.app.state.storage_client


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
