from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.engine.url import make_url
from dotenv import load_dotenv
import os

load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/library.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# SQLite file databases need their directory to exist
url = make_url(DATABASE_URL)
if url.drivername.startswith("sqlite") and url.database and url.database != ":memory:":
    db_dir = os.path.dirname(url.database)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

engine = create_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(bind=engine):
    from library_app import models

    models.Base.metadata.create_all(bind=bind)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
