#!/usr/bin/env python3
"""
Catalog Seed Script
Populate movies, theaters and showtimes for local development

Features:
1. Create tables (seat_lock and booking included) if they do not exist
2. Insert a small catalog: movies x theaters x the next few days
3. Print a bearer token for a demo user

Notes:
- Catalog rows are normally owned by the catalog service; this is for local runs only
- Seats are not seeded; a seat is free until a booking claims it
"""

import asyncio
from dataclasses import dataclass
from datetime import date, time, timedelta

from sqlalchemy import func, select
from uuid_utils.compat import uuid7

from src.platform.database.orm_db_setting import (
    create_db_and_tables,
    dispose_engines,
    get_session_maker,
)
from src.service.cinema_booking.driven_adapter.model.catalog_model import (
    MovieModel,
    ShowtimeModel,
    TheaterModel,
)
from src.service.cinema_booking.driving_adapter.http_controller.auth.jwt_auth import JwtAuth

DEMO_USER_ID = 'demo-user'
DAYS_AHEAD = 3
SHOW_TIMES = [time(13, 0), time(16, 30), time(20, 0)]

@dataclass
class MovieConfig:
    title: str
    genre: str
    duration_minutes: int
    rating: str
    price: int

@dataclass
class TheaterConfig:
    name: str
    city: str
    location: str

MOVIES = [
    MovieConfig('Inception', genre='Sci-Fi', duration_minutes=148, rating='PG-13', price=250),
    MovieConfig('Spirited Away', genre='Animation', duration_minutes=125, rating='PG', price=200),
    MovieConfig('The Dark Knight', genre='Action', duration_minutes=152, rating='PG-13', price=280),
]

THEATERS = [
    TheaterConfig(name='Cineplex Central', city='Mumbai', location='Lower Parel'),
    TheaterConfig(name='Starlight Screens', city='Bengaluru', location='Indiranagar'),
]

async def create_catalog(session) -> int:
    """
    Returns:
        int: number of showtimes created
    """
    movies = [
        MovieModel(
            id=uuid7(),
            title=config.title,
            genre=config.genre,
            duration_minutes=config.duration_minutes,
            rating=config.rating,
            language='English',
        )
        for config in MOVIES
    ]
    theaters = [
        TheaterModel(id=uuid7(), name=config.name, city=config.city, location=config.location)
        for config in THEATERS
    ]
    session.add_all(movies + theaters)
    await session.flush()

    print(f'🎬 Created {len(movies)} movies and {len(theaters)} theaters')

    today = date.today()
    showtimes = [
        ShowtimeModel(
            id=uuid7(),
            movie_id=movie.id,
            theater_id=theater.id,
            show_date=today + timedelta(days=offset),
            show_time=show_time,
            price=config.price,
        )
        for movie, config in zip(movies, MOVIES)
        for theater in theaters
        for offset in range(DAYS_AHEAD)
        for show_time in SHOW_TIMES
    ]
    session.add_all(showtimes)
    print(f'🕒 Created {len(showtimes)} showtimes')
    return len(showtimes)

async def verify_data() -> None:
    print('🔍 Verifying seeded data...')
    async with get_session_maker()() as session:
        for model in (MovieModel, TheaterModel, ShowtimeModel):
            count = await session.scalar(select(func.count()).select_from(model))
            print(f'   {model.__tablename__.capitalize()} count: {count}')

        result = await session.execute(
            select(ShowtimeModel)
            .order_by(ShowtimeModel.show_date, ShowtimeModel.show_time)
            .limit(3)
        )
        for showtime in result.scalars().all():
            print(
                f'      Showtime ID={showtime.id}, {showtime.movie.title} @ '
                f'{showtime.theater.name} {showtime.show_date} {showtime.show_time}'
            )

async def _seed_data() -> None:
    async with get_session_maker()() as session:
        try:
            await create_catalog(session)
            await session.commit()
            print('✅ All data committed successfully!')
        except Exception as e:
            await session.rollback()
            print(f'❌ Rolling back: {e}')
            raise

async def main() -> None:
    print('🌱 Starting data seeding...')
    print('=' * 50)

    try:
        await create_db_and_tables()
        await _seed_data()
        await verify_data()

        print()
        print('=' * 50)
        print('🌱 Data seeding completed!')
        print(f'🔑 Bearer token for {DEMO_USER_ID}:')
        print(f'   {JwtAuth().create_jwt_token(user_id=DEMO_USER_ID)}')

    except Exception as e:
        print(f'❌ Seeding failed: {e}')
        raise SystemExit(1) from e

    finally:
        await dispose_engines()


if __name__ == '__main__':
    asyncio.run(main())
