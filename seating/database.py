from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from seating.config import DATABASE_URL


def make_engine(url):
    if not url.startswith("sqlite"):
        return create_engine(url)

    if url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise each thread sees an empty database
        return create_engine(
            url,
            connect_args = {"check_same_thread": False},
            poolclass = StaticPool
        )

    return create_engine(url, connect_args = {"check_same_thread": False})


engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit = False, autoflush = False, bind = engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
