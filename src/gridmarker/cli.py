"""Unified CLI for gridmarker.

All commands are registered on a single ``typer.Typer`` app and exposed
via the ``gridmarker`` console entry-point.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated, List, Optional

import typer

app = typer.Typer(
    name="gridmarker",
    help="Detect the 3×3 coloured-patch marker in photos and score its coverage.",
    add_completion=False,
    no_args_is_help=True,
)

# ---------------------------------------------------------------------------
# Shared option types
# ---------------------------------------------------------------------------

DebugOpt = Annotated[
    bool, typer.Option("--debug", help="Verbose per-image diagnostics.")
]
MaxWidthOpt = Annotated[int, typer.Option(help="Downscale wider images to this width.")]
MaxHeightOpt = Annotated[
    int, typer.Option(help="Downscale taller images to this height.")
]


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _require_path(path: Path, label: str, hint: str = "") -> None:
    """Abort with a clear message when *path* is missing."""
    if not path.exists():
        msg = f"{label} not found at {path}."
        if hint:
            msg += f" {hint}"
        raise typer.BadParameter(msg)


# ── Detection ─────────────────────────────────────────────────────────────


@app.command()
def scan(
    images: Annotated[
        List[Path], typer.Argument(help="Pictures to check for the marker.")
    ],
    debug: DebugOpt = False,
    params: Annotated[
        Optional[Path], typer.Option(help="JSON file overriding grid thresholds.")
    ] = None,
    workers: Annotated[
        int, typer.Option(min=1, help="Images processed in parallel.")
    ] = 1,
    debug_dir: Annotated[
        Optional[Path], typer.Option(help="Write annotated PNGs here.")
    ] = None,
    max_width: MaxWidthOpt = 640,
    max_height: MaxHeightOpt = 480,
) -> None:
    """Print ``<image> <percent>%`` per picture; exit 1 if any picture fails."""
    from .draw import write_debug_images
    from .params import SegmentationParams, load_params
    from .pipeline import format_debug_line, format_result_line, scan_images

    _configure_logging(debug)

    if params is not None:
        _require_path(params, "Params file")
    try:
        grid_params = load_params(params)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    seg_params = SegmentationParams(max_width=max_width, max_height=max_height)

    valid: list[Path] = []
    any_invalid = False
    for path in images:
        if path.is_file():
            valid.append(path)
        else:
            typer.echo(f"{path} is not a valid picture path", err=True)
            any_invalid = True
    if not valid:
        raise typer.Exit(code=1)

    results = scan_images(
        valid, grid_params, seg_params, workers=workers, keep_image=debug_dir is not None
    )

    passed = 0
    for item in results:
        name = str(item.path)
        res = item.result
        if item.passed:
            passed += 1

        if debug:
            print(format_debug_line(name, res))
            if res is not None and res.spacing is not None:
                cov = f"{res.coverage.ratio:.3f}" if res.coverage else "n/a"
                print(
                    f"[final] cvx={res.spacing.cvx:.3f} cvy={res.spacing.cvy:.3f} "
                    f"coverage_ratio={cov} fallback={res.fallback or '-'}"
                )
            print(f"{name} took {item.elapsed_ms:.0f} ms")
        print(format_result_line(name, res))

        if debug_dir is not None and item.image is not None:
            write_debug_images(
                debug_dir,
                item.path.stem,
                item.image,
                item.patches or [],
                res.grid if res else None,
                res.coverage if res else None,
            )

    failed = len(results) - passed
    if debug:
        print(f"\nSummary: passed={passed} failed={failed} out of {len(results)}")

    if failed or any_invalid:
        raise typer.Exit(code=1)


@app.command()
def patches(
    image: Annotated[Path, typer.Argument(help="Picture to segment.")],
    max_width: MaxWidthOpt = 640,
    max_height: MaxHeightOpt = 480,
) -> None:
    """List the coloured patches found in IMAGE (id, colour, centre, box, area)."""
    from .params import SegmentationParams
    from .pipeline import load_image
    from .segment import resize_to_fit, segment_color_patches

    _require_path(image, "Image")
    try:
        img = load_image(image)
    except FileNotFoundError as exc:
        raise typer.BadParameter(str(exc)) from exc

    seg_params = SegmentationParams(max_width=max_width, max_height=max_height)
    working = resize_to_fit(img, seg_params.max_width, seg_params.max_height)
    found = segment_color_patches(working, seg_params)

    h, w = working.shape[:2]
    print(f"{len(found)} patches in {image} ({w}x{h})\n")
    header = f"{'Id':>3}  {'Color':<8}  {'Center':>16}  {'Box (x,y,w,h)':>22}  {'Area':>8}"
    print(header)
    print("-" * len(header))
    for p in found:
        center = f"({p.center[0]:.1f}, {p.center[1]:.1f})"
        box = "({}, {}, {}, {})".format(*p.box)
        print(f"{p.id:>3}  {p.color:<8}  {center:>16}  {box:>22}  {p.area:>8.0f}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
