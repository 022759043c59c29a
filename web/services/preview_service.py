"""SVG preview generation service for cut order visualization."""
from typing import List, Optional, Tuple

from cutorder.job_parser import Job
from cutorder.models import OptimizationResult, Point
from cutorder.utils.geometry import tessellate_chain


# Color palette for preview elements
class Colors:
    """SVG color constants for preview elements."""
    CUT = '#5a7a8a'          # Teal
    UNCUT = '#ced4da'        # Medium gray
    RAPID = '#ff8c00'        # Orange
    PIERCE = '#2F055A'       # Purple
    ORIGIN = '#5a8a6e'       # Green

    BACKGROUND = '#f8f9fa'   # Off-white
    OUTLINE = '#dee2e6'      # Gray


Bounds = Tuple[float, float, float, float]


class PreviewService:
    """Service for generating SVG previews of cut order results."""

    # SVG rendering constants
    PADDING = 20
    TARGET_WIDTH = 800  # pixels across the drawing area

    @staticmethod
    def generate_svg(job: Job, result: OptimizationResult, origin: Optional[Point] = None) -> str:
        """
        Generate SVG markup for a cut order preview.

        Chains are drawn as polylines (cut chains in color, chains without a
        sequenced cut in gray), rapids as dashed orange lines, and each cut's
        pierce point is numbered in cut order.

        Args:
            job: Parsed job supplying chain geometry
            result: Optimization result to draw
            origin: Tool start position, marked if given

        Returns:
            Complete SVG markup string
        """
        padding = PreviewService.PADDING
        polylines = {chain_id: tessellate_chain(chain) for chain_id, chain in job.chains.items()}

        extra = [p for rapid in result.rapids for p in (rapid.start, rapid.end)]
        if origin is not None:
            extra.append(origin)
        bounds = PreviewService._bounds([p for pts in polylines.values() for p in pts] + extra)
        min_x, min_y, max_x, max_y = bounds

        width = max(max_x - min_x, 1e-6)
        height = max(max_y - min_y, 1e-6)
        scale = PreviewService.TARGET_WIDTH / max(width, height)

        svg_width = width * scale + padding * 2
        svg_height = height * scale + padding * 2

        def to_svg(p: Point) -> Tuple[float, float]:
            # SVG y grows downward
            return padding + (p.x - min_x) * scale, padding + (max_y - p.y) * scale

        svg_parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {svg_width:.2f} {svg_height:.2f}" '
            f'width="{svg_width:.2f}" height="{svg_height:.2f}" style="background: {Colors.BACKGROUND};">'
        ]
        svg_parts.append(
            f'<rect x="{padding}" y="{padding}" width="{width * scale:.2f}" height="{height * scale:.2f}" '
            f'fill="none" stroke="{Colors.OUTLINE}" stroke-width="1"/>'
        )

        PreviewService._draw_chains(svg_parts, polylines, result, to_svg)
        PreviewService._draw_rapids(svg_parts, result, to_svg)
        PreviewService._draw_sequence(svg_parts, result, to_svg)
        if origin is not None:
            ox, oy = to_svg(origin)
            svg_parts.append(f'<circle cx="{ox:.2f}" cy="{oy:.2f}" r="5" fill="{Colors.ORIGIN}"/>')

        svg_parts.append('</svg>')
        return ''.join(svg_parts)

    @staticmethod
    def _bounds(points: List[Point]) -> Bounds:
        """Bounding box of all points, or a unit box when there are none."""
        if not points:
            return 0.0, 0.0, 1.0, 1.0
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return min(xs), min(ys), max(xs), max(ys)

    @staticmethod
    def _draw_chains(svg_parts: List[str], polylines, result: OptimizationResult, to_svg) -> None:
        """Draw chain geometry, highlighting chains that are cut."""
        cut_chain_ids = {cut.chain_id for cut in result.ordered_cuts}
        for chain_id, points in polylines.items():
            if len(points) < 2:
                continue
            coords = ' '.join(f"{x:.2f},{y:.2f}" for x, y in map(to_svg, points))
            color = Colors.CUT if chain_id in cut_chain_ids else Colors.UNCUT
            svg_parts.append(
                f'<polyline points="{coords}" fill="none" stroke="{color}" stroke-width="2"/>'
            )

    @staticmethod
    def _draw_rapids(svg_parts: List[str], result: OptimizationResult, to_svg) -> None:
        """Draw rapid traversals as dashed lines."""
        for rapid in result.rapids:
            x1, y1 = to_svg(rapid.start)
            x2, y2 = to_svg(rapid.end)
            svg_parts.append(
                f'<line x1="{x1:.2f}" y1="{y1:.2f}" x2="{x2:.2f}" y2="{y2:.2f}" '
                f'stroke="{Colors.RAPID}" stroke-width="1.5" stroke-dasharray="5,3"/>'
            )

    @staticmethod
    def _draw_sequence(svg_parts: List[str], result: OptimizationResult, to_svg) -> None:
        """Mark each pierce point with its position in the cut order."""
        for seq_num, rapid in enumerate(result.rapids, 1):
            cx, cy = to_svg(rapid.end)
            svg_parts.append(f'<circle cx="{cx:.2f}" cy="{cy:.2f}" r="4" fill="{Colors.PIERCE}"/>')
            svg_parts.append(
                f'<text x="{cx + 8:.2f}" y="{cy - 8:.2f}" font-size="14" font-weight="bold" '
                f'fill="{Colors.PIERCE}" font-family="Arial, sans-serif">{seq_num}</text>'
            )
