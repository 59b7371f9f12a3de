from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import DeclarativeBase, Session, relationship, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import func as sqlfunc

try:
    from .config import DATABASE_URL, DB_ECHO
except ImportError:
    from config import DATABASE_URL, DB_ECHO


class Base(DeclarativeBase):
    pass


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    # in-memory SQLite lives inside a single connection
    if url in {"sqlite://", "sqlite:///:memory:"}:
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(DATABASE_URL, echo=DB_ECHO, future=True, **_engine_kwargs(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class School(Base):
    __tablename__ = "school"
    id = Column(Integer, primary_key=True)
    school_id = Column(String(32), unique=True, nullable=False, index=True)
    school_name = Column(String(128), nullable=False)
    school_type = Column(String(32), nullable=False, index=True)  # 公立 | 私立
    school_url = Column(String(512), nullable=True)
    school_images = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=sqlfunc.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=sqlfunc.now(), onupdate=sqlfunc.now(), nullable=False
    )

    campuses = relationship(
        "Campus",
        back_populates="school",
        cascade="all, delete-orphan",
        order_by="Campus.position",
        passive_deletes=True,
    )
    departments = relationship(
        "Department",
        back_populates="school",
        cascade="all, delete-orphan",
        order_by="Department.position",
        passive_deletes=True,
    )


class Campus(Base):
    __tablename__ = "campus"
    id = Column(Integer, primary_key=True)
    school_pk = Column(Integer, ForeignKey("school.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    campus_id = Column(String(32), nullable=False)
    campus_name = Column(String(128), nullable=False)
    is_main = Column(Boolean, default=False, nullable=False)
    city = Column(String(32), nullable=False, index=True)
    district = Column(String(32), nullable=False)
    address = Column(String(256), nullable=False)
    google_map_url = Column(String(512), nullable=True)

    school = relationship("School", back_populates="campuses")


class Department(Base):
    __tablename__ = "department"
    id = Column(Integer, primary_key=True)
    school_pk = Column(Integer, ForeignKey("school.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    department_id = Column(String(32), nullable=False)
    department_name = Column(String(128), nullable=False)
    college = Column(String(128), nullable=False, default="", index=True)
    academic_group = Column(String(64), nullable=False, index=True)
    campus_ids = Column(JSON, nullable=False, default=list)
    department_description = Column(Text, nullable=True)
    years_of_study = Column(Integer, nullable=True)
    # {"114": {"plans": {...}, "assessment_standards": {...}}, ...}
    admission_data = Column(JSON, nullable=False, default=dict)

    school = relationship("School", back_populates="departments")


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
