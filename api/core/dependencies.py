"""
FastAPI dependencies that hand request handlers their store handles.
"""

from __future__ import annotations

from fastapi import Request

from .db import Postgres


def get_postgres(request: Request) -> Postgres:
    return request.app.state.postgres
