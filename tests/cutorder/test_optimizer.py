"""Tests for cut order optimization."""
import math
import pytest

from cutorder.endpoints import build_cut_points_cache
from cutorder.job_parser import Job
from cutorder.models import Chain, Cut, LeadConfig, OptimizationResult, Part, PartHole, Point, Shape
from cutorder.optimizer import (
    OptimizationSettings,
    attach_rapids,
    generate_rapids_from_cut_order,
    optimize_cut_order,
    run_optimization,
)
from cutorder.part_index import CutPartition
from cutorder.sequencer import NearestNeighborSequencer


def line(shape_id, x1, y1, x2, y2):
    return Shape(shape_id, 'line', {'start': Point(x1, y1), 'end': Point(x2, y2)})


def line_chain(chain_id, x1, y1, x2, y2):
    return Chain(chain_id, [line(f'{chain_id}-s', x1, y1, x2, y2)])


def square_chain(chain_id, x, y, size):
    return Chain(chain_id, [
        line(f'{chain_id}-a', x, y, x + size, y),
        line(f'{chain_id}-b', x + size, y, x + size, y + size),
        line(f'{chain_id}-c', x + size, y + size, x, y + size),
        line(f'{chain_id}-d', x, y + size, x, y),
    ])


def chain_map(*chains):
    return {c.id: c for c in chains}


def positions(result):
    return {cut.id: i for i, cut in enumerate(result.ordered_cuts)}


def two_plates():
    """Two plates 100 apart, each with one hole."""
    shell_a = square_chain('shell-a', 0, 0, 20)
    hole_a = square_chain('hole-a', 5, 5, 5)
    shell_b = square_chain('shell-b', 100, 0, 20)
    hole_b = square_chain('hole-b', 105, 5, 5)
    chains = chain_map(shell_a, hole_a, shell_b, hole_b)
    parts = [
        Part('a', shell_a, [PartHole('ha', hole_a)]),
        Part('b', shell_b, [PartHole('hb', hole_b)]),
    ]
    cuts = [Cut('cut-shell-a', 'shell-a'), Cut('cut-hole-a', 'hole-a'),
            Cut('cut-shell-b', 'shell-b'), Cut('cut-hole-b', 'hole-b')]
    return cuts, chains, parts


class TestEmptyAndFiltered:
    """Tests for empty input and filtering."""

    def test_empty_input(self):
        """No cuts gives an empty result."""
        result = optimize_cut_order([], {}, [])
        assert result.ordered_cuts == []
        assert result.rapids == []
        assert result.total_distance == 0

    def test_all_chains_missing(self):
        """If no cut has a chain, nothing is ordered."""
        result = optimize_cut_order([Cut('1', 'x'), Cut('2', 'y')], {}, [])
        assert result.ordered_cuts == []
        assert result.rapids == []
        assert result.total_distance == 0
        assert result.dropped_cut_ids == ['1', '2']

    def test_missing_chain_filtered(self):
        """Cuts with a missing chain never appear in the order."""
        chains = chain_map(line_chain('a', 1, 1, 2, 2))
        cuts = [Cut('good', 'a'), Cut('bad', 'missing')]

        result = optimize_cut_order(cuts, chains, [])

        assert [c.id for c in result.ordered_cuts] == ['good']
        assert result.dropped_cut_ids == ['bad']
        assert any('missing' in w for w in result.warnings)

    def test_empty_chain_dropped(self):
        """A cut whose chain has no shapes is dropped, the rest still ordered."""
        chains = chain_map(line_chain('a', 1, 1, 2, 2), Chain('empty', []))
        cuts = [Cut('blank', 'empty'), Cut('good', 'a')]

        result = optimize_cut_order(cuts, chains, [])

        assert [c.id for c in result.ordered_cuts] == ['good']
        assert result.dropped_cut_ids == ['blank']


    def test_malformed_shape_dropped(self):
        """A shape with unusable numbers is dropped instead of raising."""
        bad = Chain('bad', [Shape('s', 'circle', {'center': Point(0, 0), 'radius': None})])
        chains = chain_map(bad, line_chain('a', 1, 1, 2, 2))
        cuts = [Cut('broken', 'bad'), Cut('good', 'a')]

        result = optimize_cut_order(cuts, chains, [])

        assert [c.id for c in result.ordered_cuts] == ['good']
        assert result.dropped_cut_ids == ['broken']

    def test_shape_missing_geometry_key_dropped(self):
        """A shape missing a geometry key is dropped instead of raising."""
        bad = Chain('bad', [Shape('s', 'arc', {'center': Point(0, 0)})])
        result = optimize_cut_order([Cut('broken', 'bad')], chain_map(bad), [])
        assert result.ordered_cuts == []
        assert result.dropped_cut_ids == ['broken']

class TestNearestNeighbor:
    """Tests for greedy ordering of cuts outside parts."""

    def test_single_cut(self):
        """One cut from (5,5) to (15,15): one rapid from the origin to its start."""
        chains = chain_map(line_chain('c', 5, 5, 15, 15))
        result = optimize_cut_order([Cut('only', 'c')], chains, [])

        assert len(result.ordered_cuts) == 1
        assert result.rapids[0].start == Point(0, 0)
        assert result.rapids[0].end == Point(5, 5)
        assert result.total_distance == pytest.approx(math.hypot(5, 5))

    def test_nearest_first(self):
        """The cut whose start is nearest the origin is chosen first."""
        chains = chain_map(
            line_chain('chain-3', 20, 20, 21, 21),
            line_chain('chain-1', 1, 1, 2, 2),
            line_chain('chain-2', 10, 10, 11, 11),
        )
        cuts = [Cut('cut-3', 'chain-3'), Cut('cut-1', 'chain-1'), Cut('cut-2', 'chain-2')]

        result = optimize_cut_order(cuts, chains, [])

        assert [c.id for c in result.ordered_cuts] == ['cut-1', 'cut-2', 'cut-3']

    def test_follows_cut_ends(self):
        """The search continues from the end of the previous cut."""
        chains = chain_map(
            line_chain('a', 1, 0, 50, 0),
            line_chain('b', 2, 0, 3, 0),
            line_chain('c', 51, 0, 52, 0),
        )
        cuts = [Cut('a', 'a'), Cut('b', 'b'), Cut('c', 'c')]

        result = optimize_cut_order(cuts, chains, [])

        # a starts nearest the origin, and ends next to c
        assert [c.id for c in result.ordered_cuts] == ['a', 'c', 'b']

    def test_tie_goes_to_first_listed(self):
        """Equidistant candidates are broken by input order."""
        chains = chain_map(line_chain('x', 0, 3, 0, 4), line_chain('y', 3, 0, 4, 0))
        result = optimize_cut_order([Cut('second', 'y'), Cut('first', 'x')], chains, [])
        assert result.ordered_cuts[0].id == 'second'

    def test_custom_origin(self):
        """The first rapid starts at the supplied origin."""
        chains = chain_map(line_chain('a', 0, 0, 1, 0), line_chain('b', 100, 100, 101, 100))
        cuts = [Cut('a', 'a'), Cut('b', 'b')]

        result = optimize_cut_order(cuts, chains, [], origin=Point(90, 90))

        assert result.rapids[0].start == Point(90, 90)
        assert result.ordered_cuts[0].id == 'b'

    def test_completeness_and_parallel_rapids(self):
        """Every valid cut is ordered once, with one rapid each."""
        chains = chain_map(*[line_chain(f'c{i}', i * 7 % 13, i * 3 % 11, 0, 0) for i in range(10)])
        cuts = [Cut(f'cut{i}', f'c{i}') for i in range(10)]

        result = optimize_cut_order(cuts, chains, [])

        assert len(result.ordered_cuts) == len(cuts)
        assert len(result.rapids) == len(result.ordered_cuts)
        assert {c.id for c in result.ordered_cuts} == {c.id for c in cuts}
        assert result.dropped_cut_ids == []

    def test_total_distance_is_sum_of_rapids(self):
        """Total distance equals the summed rapid lengths, and rapids chain up."""
        chains = chain_map(
            line_chain('a', 3, 4, 10, 4),
            line_chain('b', 10, 8, 2, 8),
            line_chain('c', 20, 20, 25, 25),
        )
        cuts = [Cut('a', 'a'), Cut('b', 'b'), Cut('c', 'c')]

        result = optimize_cut_order(cuts, chains, [])

        assert result.total_distance >= 0
        assert result.total_distance == pytest.approx(sum(r.length for r in result.rapids))
        for prev_cut, rapid in zip(result.ordered_cuts, result.rapids[1:]):
            assert rapid.start == chains[prev_cut.chain_id].shapes[-1].geometry['end']

    def test_equal_cuts_both_ordered(self):
        """Cuts with identical fields are still separate cuts."""
        chains = chain_map(line_chain('a', 1, 1, 2, 2))
        cuts = [Cut('dup', 'a'), Cut('dup', 'a')]

        result = optimize_cut_order(cuts, chains, [])

        assert len(result.ordered_cuts) == 2
        assert result.ordered_cuts[0] is cuts[0]
        assert result.ordered_cuts[1] is cuts[1]
        assert any('Duplicate' in w for w in result.warnings)

    def test_rapid_ids_unique(self):
        """Every rapid gets its own id."""
        chains = chain_map(line_chain('a', 1, 1, 2, 2), line_chain('b', 3, 3, 4, 4))
        result = optimize_cut_order([Cut('a', 'a'), Cut('b', 'b')], chains, [])
        assert len({r.id for r in result.rapids}) == 2

    def test_lead_in_affects_order(self):
        """A lead-in moves the effective start used for the search."""
        chains = chain_map(line_chain('a', 10, 0, 20, 0), line_chain('b', 0, 12, 0, 20))
        # Without a lead, a (10 away) beats b (12 away); a 5 long line lead-in puts b at 7
        cuts = [Cut('a', 'a'), Cut('b', 'b', lead_in_config=LeadConfig('line', 5.0))]

        result = optimize_cut_order(cuts, chains, [])

        assert result.ordered_cuts[0].id == 'b'
        assert result.rapids[0].end.y == pytest.approx(7.0)

    def test_lead_out_affects_next_cut(self):
        """The search continues from the end of a lead-out, not the chain end."""
        chains = chain_map(
            line_chain('a', 0, 0, 10, 0),
            line_chain('b', 4, 3, 4, 8),
            line_chain('c', 20, 5, 25, 5),
        )
        # From (10, 0) b is nearer; a 10 long lead-out ends at (20, 0), next to c
        plain = [Cut('a', 'a'), Cut('b', 'b'), Cut('c', 'c')]
        with_lead = [Cut('a', 'a', lead_out_config=LeadConfig('line', 10.0)),
                     Cut('b', 'b'), Cut('c', 'c')]

        assert [c.id for c in optimize_cut_order(plain, chains, []).ordered_cuts] == ['a', 'b', 'c']

        result = optimize_cut_order(with_lead, chains, [])

        assert [c.id for c in result.ordered_cuts] == ['a', 'c', 'b']
        assert result.rapids[1].start.x == pytest.approx(20.0)
        assert result.rapids[1].start.y == pytest.approx(0.0)
        assert result.rapids[1].length == pytest.approx(5.0)


class TestPartOrdering:
    """Tests for hole-before-shell ordering."""

    def test_holes_before_shell(self):
        """Both holes are cut before their shell."""
        shell = line_chain('shell', 0, 0, 100, 100)
        hole1 = line_chain('hole1', 20, 20, 30, 30)
        hole2 = line_chain('hole2', 60, 60, 70, 70)
        parts = [Part('p', shell, [PartHole('h1', hole1), PartHole('h2', hole2)])]
        cuts = [Cut('shell', 'shell'), Cut('hole1', 'hole1'), Cut('hole2', 'hole2')]

        result = optimize_cut_order(cuts, chain_map(shell, hole1, hole2), parts)

        assert len(result.ordered_cuts) == 3
        pos = positions(result)
        assert pos['shell'] > pos['hole1']
        assert pos['shell'] > pos['hole2']

    def test_loose_cuts_first(self):
        """Cuts outside parts are sequenced before any part."""
        shell = square_chain('shell', 0, 0, 10)
        hole = square_chain('hole', 2, 2, 2)
        loose = line_chain('loose', 500, 500, 501, 501)
        parts = [Part('p', shell, [PartHole('h', hole)])]
        cuts = [Cut('shell', 'shell'), Cut('hole', 'hole'), Cut('loose', 'loose')]

        result = optimize_cut_order(cuts, chain_map(shell, hole, loose), parts)

        assert [c.id for c in result.ordered_cuts] == ['loose', 'hole', 'shell']

    def test_parts_one_at_a_time(self):
        """Default mode finishes one part before starting the next."""
        cuts, chains, parts = two_plates()

        result = optimize_cut_order(cuts, chains, parts)

        assert [c.id for c in result.ordered_cuts] == [
            'cut-hole-a', 'cut-shell-a', 'cut-hole-b', 'cut-shell-b'
        ]

    def test_holes_first_mode(self):
        """Holes-first mode cuts every hole before any shell."""
        cuts, chains, parts = two_plates()

        result = optimize_cut_order(cuts, chains, parts, cut_holes_first=True)

        ids = [c.id for c in result.ordered_cuts]
        assert ids[:2] == ['cut-hole-a', 'cut-hole-b']
        # From the end of hole b, shell b is nearer than shell a
        assert ids[2:] == ['cut-shell-b', 'cut-shell-a']

    def test_shell_only_part(self):
        """A part with no hole cuts still gets its shell cut."""
        shell = square_chain('shell', 0, 0, 10)
        parts = [Part('p', shell, [PartHole('h', square_chain('hole', 2, 2, 2))])]

        result = optimize_cut_order([Cut('shell', 'shell')], chain_map(shell), parts)

        assert [c.id for c in result.ordered_cuts] == ['shell']

    def test_shared_hole_first_part_wins(self):
        """A hole claimed by two parts is cut with the first part."""
        hole = square_chain('hole', 2, 2, 2)
        shell_a = square_chain('shell-a', 0, 0, 10)
        shell_b = square_chain('shell-b', 200, 0, 10)
        parts = [
            Part('a', shell_a, [PartHole('h', hole)]),
            Part('b', shell_b, [PartHole('h', hole)]),
        ]
        cuts = [Cut('shell-b', 'shell-b'), Cut('shell-a', 'shell-a'), Cut('hole', 'hole')]

        result = optimize_cut_order(cuts, chain_map(hole, shell_a, shell_b), parts)

        pos = positions(result)
        assert pos['hole'] < pos['shell-a']
        assert any('hole' in w and 'a' in w for w in result.warnings)


class TestSequencer:
    """Direct tests for NearestNeighborSequencer."""

    def test_unknown_part_skipped(self):
        """Cuts grouped under a part that is not in the part list are left unvisited."""
        chains = chain_map(line_chain('a', 1, 1, 2, 2))
        cuts = [Cut('a', 'a')]
        cache = build_cut_points_cache(cuts, chains, lambda chain_id: None)
        partition = CutPartition(unassociated=[], by_part={'ghost': [0]})

        outcome = NearestNeighborSequencer(cuts, chains, [], cache, partition).sequence()

        assert outcome.ordered == []
        assert outcome.unvisited == {0}

    def test_stalled_search_stops(self):
        """Uncached cuts are never candidates; the pool stops when only they remain."""
        chains = chain_map(line_chain('a', 1, 1, 2, 2), line_chain('b', 3, 3, 4, 4))
        cuts = [Cut('a', 'a'), Cut('b', 'b')]
        cache = build_cut_points_cache(cuts, chains, lambda chain_id: None)
        del cache[0]

        sequencer = NearestNeighborSequencer(cuts, chains, [], cache, CutPartition(unassociated=[0, 1]))
        outcome = sequencer.sequence()

        assert outcome.ordered == [1]
        assert outcome.unvisited == {0}

    def test_find_nearest_empty_pool(self):
        """An empty pool has no nearest cut."""
        sequencer = NearestNeighborSequencer([], {}, [], {}, CutPartition())
        assert sequencer.find_nearest([]) is None


class TestPreservedOrder:
    """Tests for generate_rapids_from_cut_order()."""

    def test_keeps_input_order(self):
        """Cuts stay in the order given even when a shorter route exists."""
        chains = chain_map(line_chain('far', 50, 0, 51, 0), line_chain('near', 1, 0, 2, 0))
        cuts = [Cut('far', 'far'), Cut('near', 'near')]

        result = generate_rapids_from_cut_order(cuts, chains, [])

        assert [c.id for c in result.ordered_cuts] == ['far', 'near']
        assert result.rapids[0].end == Point(50, 0)
        assert result.rapids[1].start == Point(51, 0)
        assert result.total_distance == pytest.approx(50 + 50)

    def test_missing_chain_dropped(self):
        """Cuts that cannot be positioned are skipped and reported."""
        chains = chain_map(line_chain('a', 1, 0, 2, 0))
        result = generate_rapids_from_cut_order([Cut('x', 'missing'), Cut('a', 'a')], chains, [])
        assert [c.id for c in result.ordered_cuts] == ['a']
        assert result.dropped_cut_ids == ['x']

    def test_empty(self):
        """No cuts gives an empty result."""
        assert generate_rapids_from_cut_order([], {}, []).ordered_cuts == []


class TestRunOptimization:
    """Tests for run_optimization() and attach_rapids()."""

    def test_dispatch_preserve_order(self):
        """preserve_order keeps the job's cut order."""
        chains = chain_map(line_chain('far', 50, 0, 51, 0), line_chain('near', 1, 0, 2, 0))
        job = Job(cuts=[Cut('far', 'far'), Cut('near', 'near')], chains=chains)

        kept = run_optimization(job, OptimizationSettings(preserve_order=True))
        optimized = run_optimization(job, OptimizationSettings())

        assert [c.id for c in kept.ordered_cuts] == ['far', 'near']
        assert [c.id for c in optimized.ordered_cuts] == ['near', 'far']

    def test_settings_origin(self):
        """The settings origin is used as the start position."""
        job = Job(cuts=[Cut('a', 'a')], chains=chain_map(line_chain('a', 1, 0, 2, 0)))
        result = run_optimization(job, OptimizationSettings(origin_x=5.0, origin_y=-2.0))
        assert result.rapids[0].start == Point(5.0, -2.0)

    def test_attach_rapids(self):
        """attach_rapids returns copies with rapid_in set and leaves inputs alone."""
        chains = chain_map(line_chain('a', 1, 1, 2, 2), line_chain('b', 3, 3, 4, 4))
        cuts = [Cut('a', 'a'), Cut('b', 'b')]
        result = optimize_cut_order(cuts, chains, [])

        with_rapids = attach_rapids(result)

        assert [c.id for c in with_rapids] == ['a', 'b']
        assert with_rapids[0].rapid_in is result.rapids[0]
        assert with_rapids[1].rapid_in.end == Point(3, 3)
        assert with_rapids[0] is not cuts[0]
        assert cuts[0].rapid_in is None

    def test_attach_rapids_empty(self):
        """An empty result has no cuts to attach to."""
        assert attach_rapids(OptimizationResult()) == []
