from __future__ import annotations

from pathlib import Path

import typer

from .assets import SpriteAssetError, SpriteAssets, circle_sprite_assets, load_sprite_assets
from .paths import default_runtime_dir

app = typer.Typer(add_completion=False)

_BASE_DIR_HELP = "base path for runtime files (default: per-user OS data dir; override with ORCHARD_RUNTIME_DIR)"
_ASSETS_HELP = "directory holding white/black apple(+_core) PNGs (default: debug circles)"


def _load_assets(assets_dir: Path | None) -> SpriteAssets:
    if assets_dir is None:
        return circle_sprite_assets()
    try:
        return load_sprite_assets(assets_dir)
    except SpriteAssetError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


def _load_sequence_or_exit(sequence_file: Path):
    from .sequence import SequenceCodecError, load_sequence_file

    if not sequence_file.is_file():
        typer.echo(f"sequence file not found: {sequence_file}", err=True)
        raise typer.Exit(code=1)
    try:
        return load_sequence_file(sequence_file)
    except SequenceCodecError as exc:
        typer.echo(f"invalid sequence file {sequence_file}: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _warn_asset_mismatch(expected: str, assets: SpriteAssets) -> None:
    if expected and expected != assets.name:
        typer.echo(f"note: sequence was generated with asset set {expected!r}, playing with {assets.name!r}", err=True)


@app.command("generate")
def cmd_generate(
    frames_dir: Path = typer.Argument(..., help="directory of source frames (png/jpg/...)"),
    out: Path = typer.Option(Path("orchard.seq.gz"), "--out", "-o", help="output sequence file"),
    assets_dir: Path | None = typer.Option(None, "--assets-dir", help=_ASSETS_HELP),
    width: int | None = typer.Option(None, min=1, help="working width (default: orchard.cfg, then source)"),
    height: int | None = typer.Option(None, min=1, help="working height (default: orchard.cfg, then source)"),
    step: int | None = typer.Option(None, min=1, help="source frames to advance per output frame"),
    start: int | None = typer.Option(None, min=0, help="first source frame index"),
    max_frames: int | None = typer.Option(None, min=1, help="stop after N output frames"),
    seed: int | None = typer.Option(None, help="RNG seed (default: orchard.cfg, then random)"),
    max_apples: int | None = typer.Option(None, min=1, help="spawn calls per frame before it is forced to finalize"),
    diff_target: float | None = typer.Option(None, min=0.0, max=1.0, help="distance bar at the end of a frame"),
    sample_spacing: int | None = typer.Option(None, min=1, help="fitness sample grid stride"),
    initial_pool: int | None = typer.Option(None, min=1, help="random candidates per spawn"),
    spawns_per_tick: int | None = typer.Option(None, min=1, help="spawn calls per host tick"),
    fps: int | None = typer.Option(None, min=1, help="playback fps stored in the sequence"),
    window: bool = typer.Option(False, "--window", help="show progress and playback in a Raylib window"),
    trace: bool = typer.Option(False, "--trace", help="write a generation trace log under base-dir/logs"),
    base_dir: Path = typer.Option(default_runtime_dir(), "--base-dir", "--runtime-dir", help=_BASE_DIR_HELP),
) -> None:
    """Approximate a frame sequence with apples and save the result."""
    from .config import ensure_orchard_cfg
    from .driver import FrameConvergenceDriver
    from .frames import FrameSourceError, ImageSequenceSource, limit_frame_paths, list_frame_paths
    from .sequence import SequenceHeader, SequenceRecorder, dump_sequence_file
    from .session import GenerationSession
    from .trace_log import close_trace_log, init_trace_log

    base_dir.mkdir(parents=True, exist_ok=True)
    try:
        cfg = ensure_orchard_cfg(base_dir)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    try:
        params = cfg.search_params().with_overrides(
            max_apples=max_apples,
            diff_target=diff_target,
            sample_spacing=sample_spacing,
            initial_pool=initial_pool,
            spawns_per_tick=spawns_per_tick,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    step = int(step if step is not None else cfg.frame_step)
    start = int(start if start is not None else cfg.start_frame)
    size = cfg.frame_size
    if width is not None or height is not None:
        if width is None or height is None:
            raise typer.BadParameter("--width and --height must be given together", param_hint="--width")
        size = (int(width), int(height))
    if seed is None:
        seed = cfg.seed
    playback_fps = int(fps if fps is not None else cfg.playback_fps)

    assets = _load_assets(assets_dir)
    try:
        paths = limit_frame_paths(list_frame_paths(frames_dir), step=step, start=start, max_frames=max_frames)
        source = ImageSequenceSource(paths, size=size, step=step, start=start)
    except FrameSourceError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    frame_w, frame_h = source.size
    session = GenerationSession.create(frame_w, frame_h, assets, params=params, seed=seed)
    recorder = SequenceRecorder(
        SequenceHeader(
            width=frame_w,
            height=frame_h,
            fps=playback_fps,
            background=params.background,
            frame_step=step,
            asset_set=assets.name,
        )
    )
    driver = FrameConvergenceDriver(session, source, recorder)

    if trace:
        log_path = init_trace_log(
            base_dir=base_dir,
            command="generate",
            source=frames_dir,
            assets=assets.name,
            seed=seed,
            max_apples=params.max_apples,
            diff_target=params.diff_target,
        )
        typer.echo(f"trace: {log_path}")
    try:
        if window:
            from pith.app import run_view

            from .runtime import StudioRuntime
            from .views import StudioView

            runtime = StudioRuntime(driver, playback_fps=playback_fps)
            run_view(StudioView(runtime, assets), title=f"Orchard - {frames_dir.name}")
            sequence = runtime.sequence if runtime.sequence is not None else recorder.finish()
        else:
            sequence = driver.run()
    except (FrameSourceError, ValueError) as exc:
        # SnapshotError is a ValueError: startup validation lands here too.
        typer.echo(f"generation aborted: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        if trace:
            close_trace_log()

    if not sequence.frames:
        typer.echo("no frames were recorded", err=True)
        raise typer.Exit(code=1)
    dump_sequence_file(out, sequence)
    sprites = sum(frame.sprite_count for frame in sequence.frames)
    typer.echo(f"recorded {len(sequence.frames)} frames ({sprites} apples) -> {out}")


@app.command("play")
def cmd_play(
    sequence_file: Path = typer.Argument(..., help="sequence file (.seq.gz)"),
    assets_dir: Path | None = typer.Option(None, "--assets-dir", help=_ASSETS_HELP),
    fps: int | None = typer.Option(None, min=1, help="playback fps (default: from the sequence)"),
    width: int = typer.Option(960, help="window width"),
    height: int = typer.Option(540, help="window height"),
) -> None:
    """Loop a recorded sequence in a Raylib window."""
    from pith.app import run_view

    from .sequence import SequencePlayer
    from .views import SequenceView

    sequence = _load_sequence_or_exit(sequence_file)
    if not sequence.frames:
        typer.echo(f"sequence has no frames: {sequence_file}", err=True)
        raise typer.Exit(code=1)
    assets = _load_assets(assets_dir)
    _warn_asset_mismatch(sequence.header.asset_set, assets)
    player = SequencePlayer(sequence, fps=fps)
    run_view(SequenceView(player, assets), width=width, height=height, title=f"Orchard - {sequence_file.name}")


@app.command("export-gif")
def cmd_export_gif(
    sequence_file: Path = typer.Argument(..., help="sequence file (.seq.gz)"),
    out: Path = typer.Argument(..., help="output .gif path"),
    assets_dir: Path | None = typer.Option(None, "--assets-dir", help=_ASSETS_HELP),
    scale: float = typer.Option(1.0, min=0.01, help="output scale relative to the working size"),
) -> None:
    """Render every recorded frame into a looping GIF."""
    from .sequence import export_gif

    sequence = _load_sequence_or_exit(sequence_file)
    if not sequence.frames:
        typer.echo(f"sequence has no frames: {sequence_file}", err=True)
        raise typer.Exit(code=1)
    assets = _load_assets(assets_dir)
    _warn_asset_mismatch(sequence.header.asset_set, assets)
    count = export_gif(sequence, assets, out, scale=scale)
    typer.echo(f"wrote {count} frames -> {out}")


@app.command("info")
def cmd_info(
    sequence_file: Path = typer.Argument(..., help="sequence file (.seq.gz)"),
    frames: bool = typer.Option(False, "--frames", help="list every recorded frame"),
) -> None:
    """Print a sequence header and frame summary."""
    sequence = _load_sequence_or_exit(sequence_file)
    header = sequence.header
    sprites = sum(frame.sprite_count for frame in sequence.frames)
    typer.echo(f"version: {sequence.version}")
    typer.echo(f"size: {header.width}x{header.height}")
    typer.echo(f"fps: {header.fps}")
    typer.echo(f"background: {header.background}")
    typer.echo(f"frame_step: {header.frame_step}")
    typer.echo(f"asset_set: {header.asset_set}")
    typer.echo(f"app_version: {header.app_version}")
    typer.echo(f"frames: {len(sequence.frames)}")
    typer.echo(f"apples: {sprites}")
    typer.echo(f"duration: {sequence.duration:.3f}s")
    if frames:
        for idx, frame in enumerate(sequence.frames):
            typer.echo(
                f"{idx:04d}  source={frame.source_index:5d}  apples={frame.sprite_count:4d}  "
                f"distance={frame.distance:.6f}"
            )


@app.command("config")
def cmd_config(
    path: Path | None = typer.Option(None, help="path to orchard.cfg (default: base-dir/orchard.cfg)"),
    base_dir: Path = typer.Option(default_runtime_dir(), "--base-dir", "--runtime-dir", help=_BASE_DIR_HELP),
) -> None:
    """Inspect orchard.cfg configuration values."""
    from .config import ORCHARD_CFG_NAME, ORCHARD_CFG_STRUCT, load_orchard_cfg

    cfg_path = path if path is not None else base_dir / ORCHARD_CFG_NAME
    if not cfg_path.is_file():
        typer.echo(f"config not found: {cfg_path}", err=True)
        raise typer.Exit(code=1)
    try:
        config = load_orchard_cfg(cfg_path)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    params = config.search_params()
    typer.echo(f"path: {config.path}")
    typer.echo(f"max_evaluations_per_spawn: {params.max_evaluations}")
    typer.echo("fields:")
    for sub in ORCHARD_CFG_STRUCT.subcons:
        name = sub.name
        if not name:
            continue
        typer.echo(f"{name}: {_format_cfg_value(config.data[name])}")


def _format_cfg_value(value: object) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, float):
        return f"{value:.6g}"
    return str(value)


def main(argv: list[str] | None = None) -> None:
    app(prog_name="orchard", args=argv)


if __name__ == "__main__":
    main()
