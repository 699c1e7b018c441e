"""Board layout and movement rules."""

from __future__ import annotations

from dataclasses import dataclass

FINAL_SQUARE = 30
DIE_FACES = 6

# fmt: off
JUMPS: dict[int, int] = {
    # Ladders (go UP)
     3: 22,   5:  8,  11: 26,  20: 29,
    # Snakes (go DOWN)
    17:  4,  19:  7,  27:  1,
}
# fmt: on


@dataclass(frozen=True)
class Jump:
    source: int
    destination: int

    @property
    def kind(self) -> str:
        return "ladder" if self.destination > self.source else "snake"


class Board:
    """Fixed-size board with a jump table.

    Overshoot is clamped to the final square before the jump lookup, so a
    clamped landing that is itself a jump source still jumps.
    """

    def __init__(self, jumps: dict[int, int] | None = None, final_square: int = FINAL_SQUARE):
        self.final_square = final_square
        self.jumps = dict(JUMPS if jumps is None else jumps)
        self._validate()

    def _validate(self) -> None:
        for source, destination in self.jumps.items():
            if not 1 <= source <= self.final_square or not 0 <= destination <= self.final_square:
                raise ValueError(f"Jump {source}->{destination} is off the board")
            if source == destination:
                raise ValueError(f"Jump {source}->{destination} goes nowhere")
            if destination in self.jumps:
                # Chained jumps would make resolution order-dependent
                raise ValueError(f"Jump {source}->{destination} lands on another jump")

    def clamp_to_final(self, square: int) -> int:
        return min(square, self.final_square)

    def apply_jump(self, square: int) -> int:
        return self.jumps.get(square, square)

    def resolve(self, position: int, die: int) -> tuple[int, int]:
        """Return ``(raw_landing, final_landing)`` for moving ``die`` squares from ``position``."""
        raw_landing = self.clamp_to_final(position + die)
        return raw_landing, self.apply_jump(raw_landing)

    def is_final(self, square: int) -> bool:
        return square >= self.final_square

    def describe_jumps(self) -> list[Jump]:
        return [Jump(source, destination) for source, destination in sorted(self.jumps.items())]


DEFAULT_BOARD = Board()
