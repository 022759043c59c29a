"""Greedy nearest-neighbor sequencing of cuts.

The sequencer walks the tool from an origin, each step choosing the
unvisited cut whose effective start is closest to the current position.
Ordering rules from part topology are enforced on top of the greedy
choice:

- Cuts outside any part are sequenced first, purely by proximity.
- Default mode: parts are processed one at a time. A part's holes are
  sequenced by proximity, then its shell is cut last, so a shell is never
  freed from the sheet before its own holes are done.
- Holes-first mode: every hole of every part is sequenced, then every
  shell. No shell anywhere is cut while any hole remains.

Cuts are tracked by their index in the input list, so cuts that compare
equal by value are still distinct.
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Set, Tuple

from .endpoints import CutPoints
from .models import Chain, Cut, Part, Point, Rapid
from .part_index import CutPartition
from .utils.geometry import calculate_distance

logger = logging.getLogger(__name__)


@dataclass
class SequenceOutcome:
    """Raw sequencing output, in cut-index terms."""
    ordered: List[int] = field(default_factory=list)
    rapids: List[Rapid] = field(default_factory=list)
    total_distance: float = 0.0
    unvisited: Set[int] = field(default_factory=set)


class NearestNeighborSequencer:
    """Sequences one set of cuts; create a new instance per run."""

    def __init__(
        self,
        cuts: List[Cut],
        chains: Mapping[str, Chain],
        parts: List[Part],
        cache: Dict[int, CutPoints],
        partition: CutPartition,
        origin: Point = Point(0.0, 0.0)
    ):
        self.cuts = cuts
        self.chains = chains
        self.parts_by_id: Dict[str, Part] = {}
        for part in parts:
            self.parts_by_id.setdefault(part.id, part)
        self.cache = cache
        self.partition = partition

        self.current_position = origin
        self.unvisited: Set[int] = {i for i, cut in enumerate(cuts) if cut.chain_id in chains}
        self.ordered: List[int] = []
        self.rapids: List[Rapid] = []
        self.total_distance = 0.0

    def find_nearest(self, pool: List[int]) -> Optional[Tuple[int, float]]:
        """
        Find the unvisited cut in pool whose cached start is nearest the
        current position.

        Ties go to the first candidate in pool order. Cuts without cached
        endpoints are not candidates.

        Returns:
            (cut index, distance), or None if no candidate exists
        """
        nearest: Optional[int] = None
        nearest_distance = float('inf')

        for index in pool:
            if index not in self.unvisited:
                continue
            points = self.cache.get(index)
            if points is None:
                continue

            distance = calculate_distance(self.current_position, points.start)
            if distance < nearest_distance:
                nearest = index
                nearest_distance = distance

        if nearest is None:
            return None
        return nearest, nearest_distance

    def visit(self, index: int, distance: float) -> None:
        """Emit the rapid into a cut, record it, and move to its end."""
        points = self.cache[index]
        self.rapids.append(Rapid(
            id=str(uuid.uuid4()),
            start=self.current_position,
            end=points.start
        ))
        self.ordered.append(index)
        self.unvisited.discard(index)
        self.total_distance += distance
        self.current_position = points.end

    def run_pool(self, pool: List[int]) -> None:
        """
        Repeatedly visit the nearest cut from pool until it is exhausted.

        The pool list is consumed. Stops early if no candidate can be found.
        """
        while pool and self.unvisited:
            found = self.find_nearest(pool)
            if found is None:
                logger.debug("Search stalled with %d cuts left in pool", len(pool))
                break

            index, distance = found
            self.visit(index, distance)
            pool.remove(index)

    def _is_shell(self, index: int, part: Part) -> bool:
        return self.cuts[index].chain_id == part.shell.id

    def _split_part_cuts(self, part: Part, indices: List[int]) -> Tuple[Optional[int], List[int]]:
        shell: Optional[int] = None
        holes: List[int] = []
        for index in indices:
            if index not in self.unvisited:
                continue
            if self._is_shell(index, part):
                shell = index
            else:
                holes.append(index)
        return shell, holes

    def _sequence_parts_interleaved(self) -> None:
        for part_id, indices in self.partition.by_part.items():
            part = self.parts_by_id.get(part_id)
            if part is None:
                continue

            shell, holes = self._split_part_cuts(part, indices)
            self.run_pool(holes)

            if shell is not None and shell in self.unvisited and shell in self.cache:
                start = self.cache[shell].start
                self.visit(shell, calculate_distance(self.current_position, start))

    def _sequence_holes_first(self) -> None:
        all_holes: List[int] = []
        all_shells: List[int] = []

        for part_id, indices in self.partition.by_part.items():
            part = self.parts_by_id.get(part_id)
            if part is None:
                continue
            for index in indices:
                if index not in self.unvisited:
                    continue
                if self._is_shell(index, part):
                    all_shells.append(index)
                else:
                    all_holes.append(index)

        self.run_pool(all_holes)
        self.run_pool(all_shells)

    def sequence(self, cut_holes_first: bool = False) -> SequenceOutcome:
        """
        Run both phases and return the ordering.

        Args:
            cut_holes_first: Cut all holes across all parts before any shell

        Returns:
            SequenceOutcome with ordered indices, rapids, and distance
        """
        self.run_pool(list(self.partition.unassociated))

        if cut_holes_first:
            self._sequence_holes_first()
        else:
            self._sequence_parts_interleaved()

        return SequenceOutcome(
            ordered=list(self.ordered),
            rapids=list(self.rapids),
            total_distance=self.total_distance,
            unvisited=set(self.unvisited)
        )
