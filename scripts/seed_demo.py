#!/usr/bin/env python3
"""
Seed script to create a demo restaurant with a floor layout and guests
"""

import asyncio
from datetime import datetime, timedelta, timezone


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from seating.database import SessionLocal, engine, Base
    from seating.models.restaurant import Restaurant
    from seating.models.layout import Layout, SeatSection, Seat
    from seating.models.reservation import Reservation, WaitlistEntry

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo restaurant already exists
        result = await db.execute(
            select(Restaurant).where(Restaurant.name == "Kanda Sushi Bar")
        )
        existing = result.scalar_one_or_none()

        if existing:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo restaurant...")

        restaurant = Restaurant(
            name="Kanda Sushi Bar",
            timezone="America/New_York",
            default_service_time="18:00",
            default_seating_minutes=90,
        )
        db.add(restaurant)
        await db.flush()

        layout = Layout(restaurant_id=restaurant.id, name="Main floor")

        # Eight-seat counter along the top of the room
        counter = SeatSection(
            name="Counter",
            section_type="counter",
            orientation="horizontal",
            offset_x=100,
            offset_y=80,
            sort_order=0,
        )
        for i in range(8):
            counter.seats.append(
                Seat(label=f"C{i + 1}", position_x=i * 60, position_y=0, sort_order=i)
            )
        layout.seat_sections.append(counter)

        # Two four-tops below it
        for t, (x, y) in enumerate([(200, 320), (420, 320)], start=1):
            table = SeatSection(
                name=f"Table {t}",
                section_type="table",
                offset_x=x,
                offset_y=y,
                sort_order=t,
            )
            for i, (dx, dy) in enumerate([(-50, 0), (50, 0), (0, -50), (0, 50)]):
                table.seats.append(
                    Seat(label=f"T{t}-{i + 1}", position_x=dx, position_y=dy, sort_order=i)
                )
            layout.seat_sections.append(table)

        db.add(layout)
        await db.flush()

        restaurant.current_layout_id = layout.id

        tonight = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0) + timedelta(hours=2)
        reservations = [
            Reservation(
                restaurant_id=restaurant.id,
                contact_name="Aiko Tanaka",
                contact_phone="+15551230001",
                party_size=2,
                start_time=tonight,
                duration_minutes=90,
                seat_preferences=[["C3", "C4"], ["C5", "C6"]],
            ),
            Reservation(
                restaurant_id=restaurant.id,
                contact_name="Sam Ortiz",
                contact_phone="+15551230002",
                party_size=4,
                start_time=tonight + timedelta(minutes=30),
                duration_minutes=90,
                seat_preferences=[["T1-1", "T1-2", "T1-3", "T1-4"]],
            ),
        ]
        db.add_all(reservations)

        walk_in = WaitlistEntry(
            restaurant_id=restaurant.id,
            contact_name="Lee",
            party_size=2,
        )
        db.add(walk_in)

        await db.commit()

        print(f"""
Demo data created successfully!

Restaurant: {restaurant.name}
  ID: {restaurant.id}
  Active layout: {layout.name} (ID: {layout.id})

Reservations: {len(reservations)} created
Waitlist: 1 walk-in party

Try:
  GET /restaurants/{restaurant.id}/layouts/{layout.id}/seat_map
  GET /restaurants/{restaurant.id}/reservations/{reservations[0].id}/seat_preferences
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
