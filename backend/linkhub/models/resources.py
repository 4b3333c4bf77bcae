from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    String,
    Text,
    func,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from linkhub.models.base import Base
from linkhub.models.enums import ResourceType


class Entry(Base):
    """Identity row of any addressable resource."""

    __tablename__ = "entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    slug: Mapped[str] = mapped_column(String(765), unique=True, nullable=False)
    type: Mapped[ResourceType] = mapped_column(
        SAEnum(
            ResourceType,
            name="type",
            native_enum=False,
            create_constraint=True,
            length=8,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )
    password_hash: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    link: Mapped["Link | None"] = relationship(
        back_populates="entry", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    file: Mapped["File | None"] = relationship(
        back_populates="entry", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )


class Link(Base):
    """Redirect target of a link entry."""

    __tablename__ = "links"

    entry_id: Mapped[int] = mapped_column(
        ForeignKey("entries.id", ondelete="CASCADE"), primary_key=True
    )
    target_url: Mapped[str] = mapped_column(Text, nullable=False)

    entry: Mapped[Entry] = relationship(back_populates="link")


class File(Base):
    """Object storage metadata of a file entry."""

    __tablename__ = "files"

    entry_id: Mapped[int] = mapped_column(
        ForeignKey("entries.id", ondelete="CASCADE"), primary_key=True
    )
    file_uuid: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(127), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    pending: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=true(), nullable=False
    )

    entry: Mapped[Entry] = relationship(back_populates="file")
