#!/usr/bin/env python3

import argparse
import logging
import os
import sys

from cutorder.job_parser import parse_job_file, ParseError
from cutorder.optimizer import OptimizationSettings, run_optimization
from cutorder.visualizer import save_plot_preview


def main():
    """Main application entry point."""
    parser = argparse.ArgumentParser(description='Optimize the cut order of a CNC cutting job')
    parser.add_argument('job_file', help='Job file in JSON format (chains, cuts, parts)')
    parser.add_argument('--origin', type=float, nargs=2, metavar=('X', 'Y'), default=(0.0, 0.0),
                        help='Tool start position (default: 0 0)')
    parser.add_argument('--holes-first', action='store_true',
                        help='Cut every hole in every part before any shell')
    parser.add_argument('--preserve-order', action='store_true',
                        help='Keep the job order and only compute rapids')
    parser.add_argument('--plot', action='store_true',
                        help='Save a PNG preview to the output directory')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable debug logging')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    try:
        job = parse_job_file(args.job_file)
    except ParseError as e:
        print(f"\n❌ ERROR: Problem with job file format:")
        print(f"{str(e)}")
        sys.exit(1)

    settings = OptimizationSettings(
        origin_x=args.origin[0],
        origin_y=args.origin[1],
        cut_holes_first=args.holes_first,
        preserve_order=args.preserve_order
    )
    result = run_optimization(job, settings)

    print(f"\nCut order ({len(result.ordered_cuts)} cuts):")
    for i, (cut, rapid) in enumerate(zip(result.ordered_cuts, result.rapids), 1):
        label = f"{cut.id} ({cut.name})" if cut.name else cut.id
        print(f"{i:3d}. {label}  rapid {rapid.length:.3f} from ({rapid.start.x:.3f}, {rapid.start.y:.3f})")

    print(f"\nTotal rapid distance: {result.total_distance:.3f}")

    if result.dropped_cut_ids:
        print(f"⚠️  Dropped cuts: {', '.join(result.dropped_cut_ids)}")
    for warning in result.warnings:
        print(f"⚠️  {warning}")

    if args.plot:
        base_name = os.path.splitext(os.path.basename(args.job_file))[0]
        plot_filename = save_plot_preview(job, result, base_name)
        print(f"Plot saved to: {plot_filename}")


if __name__ == "__main__":
    main()
