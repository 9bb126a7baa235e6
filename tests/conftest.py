"""Test configuration and fixtures"""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from seating.main import app
from seating.database import Base, get_db
from seating.models.restaurant import Restaurant
from seating.models.layout import Layout, SeatSection, Seat
from seating.models.reservation import Reservation, WaitlistEntry
from seating.services.allocation_engine import AllocationEngine


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Noon in New York on the test service day
FIXED_NOW = datetime(2030, 6, 1, 16, 0, tzinfo=timezone.utc)


def build_layout(restaurant_id: int, name: str = "Main floor") -> Layout:
    """Counter A1-A4 and a four-top B1-B4"""
    layout = Layout(restaurant_id=restaurant_id, name=name)

    counter = SeatSection(
        name="Counter",
        section_type="counter",
        orientation="horizontal",
        offset_x=100,
        offset_y=80,
        sort_order=0,
    )
    for i in range(4):
        counter.seats.append(Seat(label=f"A{i + 1}", position_x=i * 60, position_y=0, sort_order=i))
    layout.seat_sections.append(counter)

    table = SeatSection(
        name="Table 1",
        section_type="table",
        offset_x=300,
        offset_y=300,
        sort_order=1,
    )
    for i, (dx, dy) in enumerate([(-50, 0), (50, 0), (0, -50), (0, 50)]):
        table.seats.append(Seat(label=f"B{i + 1}", position_x=dx, position_y=dy, sort_order=i))
    layout.seat_sections.append(table)

    return layout


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_restaurant(test_db):
    """Create a test restaurant with an active layout"""
    restaurant = Restaurant(
        name="Test Restaurant",
        timezone="America/New_York",
        default_service_time="18:00",
        default_seating_minutes=60,
    )
    test_db.add(restaurant)
    await test_db.flush()

    layout = build_layout(restaurant.id)
    test_db.add(layout)
    await test_db.flush()

    restaurant.current_layout_id = layout.id
    await test_db.commit()

    return restaurant


@pytest.fixture
async def test_layout(test_db, test_restaurant):
    """The restaurant's active layout"""
    return await test_db.get(Layout, test_restaurant.current_layout_id)


@pytest.fixture
def make_reservation(test_db, test_restaurant):
    """Factory for reservations on the test service day"""
    async def _make(
        party_size: int = 2,
        contact_name: str = "Test Guest",
        start_time: datetime = datetime(2030, 6, 1, 22, 0, tzinfo=timezone.utc),
        duration_minutes: int = 60,
        seat_preferences=None,
    ) -> Reservation:
        reservation = Reservation(
            restaurant_id=test_restaurant.id,
            contact_name=contact_name,
            contact_phone="+15551234567",
            party_size=party_size,
            start_time=start_time,
            duration_minutes=duration_minutes,
            seat_preferences=seat_preferences or [],
            status="booked",
        )
        test_db.add(reservation)
        await test_db.commit()
        return reservation

    return _make


@pytest.fixture
async def test_reservation(make_reservation):
    """Party of two at 18:00 New York time with two preference options"""
    return await make_reservation(
        party_size=2,
        contact_name="Aiko Tanaka",
        seat_preferences=[["B1", "B2"], ["B3", "B4"]],
    )


@pytest.fixture
async def test_waitlist_entry(test_db, test_restaurant):
    """Walk-in party of three"""
    entry = WaitlistEntry(
        restaurant_id=test_restaurant.id,
        contact_name="Walk-in Lee",
        party_size=3,
        check_in_time=FIXED_NOW,
        status="waiting",
    )
    test_db.add(entry)
    await test_db.commit()
    return entry


@pytest.fixture
def allocation_engine(test_db, test_restaurant):
    """Allocation engine with the clock pinned to FIXED_NOW"""
    return AllocationEngine(test_db, test_restaurant, clock=lambda: FIXED_NOW)


@pytest.fixture
async def client(test_db):
    """Create test client with overridden database"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
