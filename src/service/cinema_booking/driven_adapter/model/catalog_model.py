"""Catalog tables. Owned by the catalog; this service only reads them."""

from datetime import date, datetime, time
from typing import List, Optional
from uuid import UUID

from sqlalchemy import ARRAY, Date, DateTime, ForeignKey, Integer, String, Text, Time
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class MovieModel(Base):
    __tablename__ = 'movie'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    genre: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    duration_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    language: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    rating: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    poster_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class TheaterModel(Base):
    __tablename__ = 'theater'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    amenities: Mapped[Optional[List[str]]] = mapped_column(ARRAY(String), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class ShowtimeModel(Base):
    __tablename__ = 'showtime'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    movie_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey('movie.id'), nullable=False, index=True
    )
    theater_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey('theater.id'), nullable=False, index=True
    )
    show_date: Mapped[date] = mapped_column(Date, nullable=False)
    show_time: Mapped[time] = mapped_column(Time, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    movie: Mapped['MovieModel'] = relationship('MovieModel', viewonly=True, lazy='joined')
    theater: Mapped['TheaterModel'] = relationship('TheaterModel', viewonly=True, lazy='joined')
