from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine


def build_engine(url: str) -> Engine:
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


def create_session(engine: Engine) -> Session:
    return Session(engine)
