from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    id: int
    name: str
    description: str


CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry(id=1, name="Snake", description="Slither. Eat. Grow. Repeat"),
    CatalogEntry(id=2, name="Tetris", description="Fit fast. Think faster"),
    CatalogEntry(id=3, name="Pacman", description="Eat dots. Dodge ghosts"),
    CatalogEntry(id=4, name="Super Pang", description="Burst or be busted!"),
    CatalogEntry(id=5, name="Connect Four", description="Four wins the war!"),
    CatalogEntry(id=6, name="Arkanoid", description="Smash. Bounce. Survive. Arkanoid"),
)
