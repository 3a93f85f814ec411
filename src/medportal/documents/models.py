from __future__ import annotations

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..db.base import Base, CreatedAtMixin


class Document(CreatedAtMixin, Base):
    """Metadata row for one uploaded file. Immutable once inserted."""

    __tablename__ = "documents"
    # AUTOINCREMENT on SQLite so ids of deleted rows are never handed out again
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    storage_path: Mapped[str] = mapped_column(String(1024), unique=True, nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<Document id={self.id} storage_path={self.storage_path!r}>"
