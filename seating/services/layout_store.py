"""Read access to floor layouts"""

from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from seating.exceptions import NotFoundError, ValidationError
from seating.models.layout import Layout, Seat
from seating.models.restaurant import Restaurant

logger = structlog.get_logger()


class SeatIndex:
    """Label and id lookups over one layout's seats"""

    def __init__(self, layout: Layout):
        self.layout = layout
        self.by_id: Dict[int, Seat] = {}
        self.by_label: Dict[str, Seat] = {}
        self.section_of: Dict[int, int] = {}
        self._duplicates = set()

        for section, seat in layout.iter_seats():
            self.by_id[seat.id] = seat
            self.section_of[seat.id] = section.id
            if seat.label in self.by_label:
                self._duplicates.add(seat.label)
            else:
                self.by_label[seat.label] = seat

    def seats_for_labels(self, labels: Iterable[str]) -> List[Seat]:
        """Resolve labels in the given order; unknown or ambiguous labels are rejected"""
        seats = []
        for label in labels:
            if label in self._duplicates:
                raise ValidationError(f"Seat label {label!r} is not unique in layout {self.layout.id}")
            seat = self.by_label.get(label)
            if seat is None:
                raise ValidationError(f"Unknown seat label {label!r} in layout {self.layout.id}")
            seats.append(seat)
        return seats

    def labels_for_ids(self, seat_ids: Iterable[int]) -> List[str]:
        labels = []
        for seat_id in seat_ids:
            seat = self.by_id.get(seat_id)
            if seat is None:
                raise ValidationError(f"Seat {seat_id} is not part of layout {self.layout.id}")
            labels.append(seat.label)
        return labels

    def label_of(self, seat_id: int) -> Optional[str]:
        seat = self.by_id.get(seat_id)
        return seat.label if seat else None


class LayoutStore:
    """Layouts of a single restaurant; the allocation engine only reads them"""

    def __init__(self, db: AsyncSession, restaurant: Restaurant):
        self.db = db
        self.restaurant = restaurant

    async def get_layout(self, layout_id: int) -> Layout:
        result = await self.db.execute(
            select(Layout).where(
                Layout.id == layout_id,
                Layout.restaurant_id == self.restaurant.id,
            )
        )
        layout = result.scalar_one_or_none()

        if not layout:
            raise NotFoundError(f"Layout {layout_id} not found")

        return layout

    async def get_all_layouts(self) -> List[Layout]:
        result = await self.db.execute(
            select(Layout)
            .where(Layout.restaurant_id == self.restaurant.id)
            .order_by(Layout.id)
        )
        return list(result.scalars().all())

    async def get_active_layout(self) -> Layout:
        if not self.restaurant.current_layout_id:
            raise NotFoundError("No active layout for this restaurant")
        return await self.get_layout(self.restaurant.current_layout_id)

    async def resolve(self, layout_id: Optional[int] = None) -> Layout:
        """Explicit layout if given, otherwise the restaurant's active one"""
        if layout_id is not None:
            return await self.get_layout(layout_id)
        return await self.get_active_layout()

    async def seat_index(self, layout_id: Optional[int] = None) -> SeatIndex:
        return SeatIndex(await self.resolve(layout_id))

    async def activate(self, layout_id: int) -> Layout:
        """Point the restaurant at a different layout"""
        layout = await self.get_layout(layout_id)
        self.restaurant.current_layout_id = layout.id
        await self.db.commit()

        logger.info(
            "Layout activated",
            restaurant_id=self.restaurant.id,
            layout_id=layout.id,
        )
        return layout
