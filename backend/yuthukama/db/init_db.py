# backend/yuthukama/db/init_db.py
from yuthukama.db.base import Base
from yuthukama.db.session import engine

# models must be imported so their tables register on Base.metadata
from yuthukama import models  # noqa: F401


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
