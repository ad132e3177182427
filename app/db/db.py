import os
from sqlmodel import Session, SQLModel, create_engine

# Table modules must be imported so their metadata is registered
from app.models import activity_log, claim, item_report  # noqa: F401


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./reclaim.db")


def make_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        # Request handlers run in a threadpool
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args)


engine = make_engine(DATABASE_URL)


def init_db(bind=None):
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session
