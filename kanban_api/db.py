from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Engine,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, sessionmaker


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


class Base(DeclarativeBase):
    pass


class Board(Base):
    __tablename__ = "kanban_boards"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(191), index=True)

    columns: Mapped[list[ColumnModel]] = relationship(
        back_populates="board", cascade="all, delete-orphan", passive_deletes=True
    )


class ColumnModel(Base):
    __tablename__ = "kanban_columns"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    board_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("kanban_boards.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(191))
    disable_add: Mapped[bool] = mapped_column(Boolean, default=False)
    order: Mapped[int] = mapped_column(Integer, default=0)

    board: Mapped[Board] = relationship(back_populates="columns")
    cards: Mapped[list[Card]] = relationship(
        back_populates="column", cascade="all, delete-orphan", passive_deletes=True
    )


class Card(Base):
    __tablename__ = "kanban_cards"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    column_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("kanban_columns.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(191))
    description: Mapped[str] = mapped_column(Text, default="")
    category_title: Mapped[str] = mapped_column(String(191), default="")
    category_color: Mapped[str] = mapped_column(String(191), default="#000000")
    priority: Mapped[str] = mapped_column(String(16), default="MEDIUM")  # URGENT|HIGH|MEDIUM|LOW
    status: Mapped[str] = mapped_column(String(16), default="TO_DO")  # TO_DO|DONE|REVIEW|PROCESS
    likes: Mapped[int] = mapped_column(Integer, default=0)

    column: Mapped[ColumnModel] = relationship(back_populates="cards")
    comments: Mapped[list[Comment]] = relationship(
        back_populates="card", cascade="all, delete-orphan", passive_deletes=True
    )


class Comment(Base):
    __tablename__ = "kanban_comments"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    card_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("kanban_cards.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(191))
    text: Mapped[str] = mapped_column(Text)
    # Parent comment on the same card. Not a foreign key; mismatches are skipped on read.
    reply_for_comment_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    card: Mapped[Card] = relationship(back_populates="comments")


class User(Base):
    """Profile columns needed to display comment authors.

    Rows are owned by the user management service; this API only reads them.
    """

    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(191), primary_key=True)
    firstname: Mapped[str] = mapped_column(String(191))
    lastname: Mapped[str] = mapped_column(String(191))
    username: Mapped[str] = mapped_column(String(191), unique=True)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(database_url: str, echo: bool = False) -> Engine:
    is_sqlite = database_url.startswith("sqlite")
    engine = create_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        pool_pre_ping=not is_sqlite,
    )
    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)
