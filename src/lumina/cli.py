"""CLI entry point for LuminaBook."""

import asyncio
import logging
import typer
from pathlib import Path
from typing import List, Optional
from enum import Enum

from . import __version__
from .config import config
from .editor import SceneStore
from .errors import LuminaError
from .models import ExportJob, ExportStatus, FontFamily, ProjectConfig

app = typer.Typer(
    name="lumina",
    help="Animated text stories rendered to video",
    no_args_is_help=True
)

PROJECT_OPTION_HELP = "Path to project file (.json or .yaml)"
FONT_OPTION_HELP = "Font file for a family, as FAMILY=PATH (repeatable)"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"lumina version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """LuminaBook - Turn text into animated scenes and export them as video."""
    pass


def _load_store(project: Path) -> SceneStore:
    if not project.exists():
        typer.echo(f"❌ No project found at {project}")
        typer.echo("   Run 'lumina new' to create a new project")
        raise typer.Exit(1)

    try:
        return SceneStore(ProjectConfig.from_file(project))
    except LuminaError as e:
        typer.echo(f"❌ Error loading project: {e}")
        raise typer.Exit(1)


def _save_store(store: SceneStore, project: Path) -> None:
    try:
        store.project.to_file(project)
    except OSError as e:
        typer.echo(f"❌ Error saving project: {e}")
        raise typer.Exit(1)


def _register_fonts(specs: Optional[List[str]]) -> None:
    from .render import register_font

    for spec in specs or []:
        family, sep, path = spec.partition("=")
        try:
            if not sep:
                raise ValueError("expected FAMILY=PATH")
            register_font(FontFamily(family), Path(path))
        except (ValueError, OSError) as e:
            typer.echo(f"❌ Invalid font {spec}: {e}")
            raise typer.Exit(1)


def _preview(text: str, limit: int = 60) -> str:
    text = " ".join(text.split())
    return text[:limit] + "..." if len(text) > limit else text


@app.command()
def new(
    title: str = typer.Argument(
        "Untitled Story",
        help="Project title"
    ),
    output: Path = typer.Option(
        Path("project.json"),
        "--output",
        "-o",
        help="Output project file path"
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing project"
    )
) -> None:
    """Create a new project with a single welcome scene."""
    if output.exists() and not force:
        typer.echo(f"❌ Project already exists: {output} (use --force to overwrite)")
        raise typer.Exit(1)

    store = SceneStore(ProjectConfig(title=title))
    _save_store(store, output)
    typer.echo(f"✅ Project created: {output}")


@app.command()
def status(
    project: Path = typer.Option(
        Path("project.json"),
        "--project",
        "-p",
        help=PROJECT_OPTION_HELP
    ),
    fps: Optional[int] = typer.Option(
        None,
        "--fps",
        help="Frame rate used for the frame count",
        min=1
    )
) -> None:
    """Show project status."""
    from .engine import compute_scene_envelope, export_duration, frame_budget, playback_duration

    store = _load_store(project)
    snapshot = store.project
    rate = fps or config.output_fps
    budget = frame_budget(snapshot, rate)

    typer.echo(f"📁 Project: {snapshot.title}")
    typer.echo(f"   Scenes: {len(snapshot.scenes)}")
    typer.echo(f"   Transition: {snapshot.global_transition}s")
    typer.echo(f"   Reading buffer: {snapshot.reading_buffer}s")
    typer.echo(f"   Playback length: {playback_duration(snapshot):.1f}s")
    typer.echo(f"   Export length: {export_duration(snapshot):.1f}s ({sum(budget)} frames at {rate} fps)")

    typer.echo("\n📽️  Scenes:")
    for scene, frames in zip(snapshot.scenes, budget):
        envelope = compute_scene_envelope(scene, snapshot)
        typer.echo(
            f"   • {scene.id}: {scene.animation.value}, "
            f"{envelope.total_scene_time:.1f}s, {frames} frames"
        )
        typer.echo(f"     → {_preview(scene.text)}")


@app.command("import")
def import_text(
    source: Path = typer.Argument(
        ...,
        help="Plain-text file, one scene per non-blank line",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    project: Path = typer.Option(
        Path("project.json"),
        "--project",
        "-p",
        help=PROJECT_OPTION_HELP
    )
) -> None:
    """Replace all scenes with the paragraphs of a text file."""
    store = _load_store(project)

    try:
        scenes = store.import_file(source)
    except LuminaError as e:
        typer.echo(f"❌ Import failed: {e}")
        raise typer.Exit(1)

    _save_store(store, project)
    language = scenes[0].language
    typer.echo(f"✅ Imported {len(scenes)} scenes from {source} ({language})")


@app.command()
def add(
    project: Path = typer.Option(
        Path("project.json"),
        "--project",
        "-p",
        help=PROJECT_OPTION_HELP
    ),
    source_id: Optional[str] = typer.Option(
        None,
        "--from",
        help="Scene to copy the style from (defaults to the first scene)"
    )
) -> None:
    """Append a new scene styled like an existing one."""
    store = _load_store(project)

    try:
        if source_id:
            store.select(source_id)
        scene = store.add()
    except LuminaError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    _save_store(store, project)
    typer.echo(f"✅ Added scene {scene.id}: {scene.text}")


@app.command()
def delete(
    scene_id: str = typer.Argument(
        ...,
        help="Id of the scene to delete"
    ),
    project: Path = typer.Option(
        Path("project.json"),
        "--project",
        "-p",
        help=PROJECT_OPTION_HELP
    )
) -> None:
    """Delete a scene."""
    store = _load_store(project)

    try:
        store.delete(scene_id)
    except LuminaError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    _save_store(store, project)
    typer.echo(f"✅ Deleted scene {scene_id} ({len(store)} remaining)")


@app.command()
def suggest(
    scene_id: Optional[str] = typer.Argument(
        None,
        help="Scene to restyle (defaults to the first scene)"
    ),
    project: Path = typer.Option(
        Path("project.json"),
        "--project",
        "-p",
        help=PROJECT_OPTION_HELP
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Restyle a scene with an AI mood analysis of its text."""
    from .agents import StyleAgent, apply_suggestion

    setup_logging(verbose)
    store = _load_store(project)

    try:
        config.validate_required()
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    try:
        scene = store.get(scene_id) if scene_id else store.active_scene
    except LuminaError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    agent = StyleAgent()
    typer.echo(f"🎨 Analyzing scene {scene.id} with {agent.model}")
    suggestion = agent.run(scene.text)

    if suggestion is None:
        typer.echo("⚠️  No suggestion available, scene left unchanged")
        return

    store.update(apply_suggestion(scene, suggestion))
    _save_store(store, project)

    typer.echo(f"✅ Mood: {suggestion.mood}")
    typer.echo(f"   Color: {suggestion.color_theme}")
    typer.echo(f"   Font: {suggestion.font_style}")
    typer.echo(f"   Animation: {suggestion.suggested_animation.value}")
    typer.echo(f"   Visual: {_preview(suggestion.visual_prompt, 70)}")


@app.command()
def play(
    project: Path = typer.Option(
        Path("project.json"),
        "--project",
        "-p",
        help=PROJECT_OPTION_HELP
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Preview the story in the terminal with playback timing."""
    from .engine import PlaybackScheduler, playback_duration

    setup_logging(verbose)
    store = _load_store(project)
    scheduler = PlaybackScheduler(store)
    total = len(store)

    def show(index: int, scene) -> None:
        typer.echo(f"\n▶️  [{index + 1}/{total}] {scene.id} ({scene.animation.value})")
        typer.echo(f"   {scene.text}")

    scheduler.on_scene(show)

    async def run() -> None:
        scheduler.start()
        try:
            await scheduler.wait_stopped()
        finally:
            scheduler.stop()

    typer.echo(f"🎬 Playing {store.title} ({playback_duration(store.project):.1f}s)")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        typer.echo("\n⏹️  Playback stopped")
        return

    typer.echo("\n✅ Playback finished")


@app.command()
def still(
    project: Path = typer.Option(
        Path("project.json"),
        "--project",
        "-p",
        help=PROJECT_OPTION_HELP
    ),
    scene_id: Optional[str] = typer.Option(
        None,
        "--scene",
        "-s",
        help="Scene to capture (defaults to the first scene)"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output PNG path (defaults to LuminaBook_<scene>.png)"
    ),
    standard: bool = typer.Option(
        False,
        "--standard",
        help="Capture at 1x instead of high resolution"
    ),
    fonts: Optional[List[str]] = typer.Option(
        None,
        "--font",
        help=FONT_OPTION_HELP
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Save a snapshot of a scene in its settled state."""
    from .render import ExportPipeline, SceneRenderer

    setup_logging(verbose)
    _register_fonts(fonts)
    store = _load_store(project)

    try:
        if scene_id:
            store.select(scene_id)
    except LuminaError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    output = output or config.workspace / f"LuminaBook_{store.active_id}.png"
    pipeline = ExportPipeline(store, SceneRenderer())
    ratio = 1.0 if standard else config.still_pixel_ratio

    typer.echo(f"📸 Capturing scene {store.active_id} at {ratio:g}x")
    try:
        job = asyncio.run(pipeline.export_still(output, pixel_ratio=ratio))
    except LuminaError as e:
        typer.echo(f"❌ Snapshot failed: {e}")
        raise typer.Exit(1)

    width, height = job.metadata["size"]
    typer.echo(f"✅ Snapshot saved: {job.output_path} ({width}x{height})")


class EncoderChoice(str, Enum):
    """Video encoder backends."""
    DUMP = "dump"
    STREAM = "stream"


@app.command()
def export(
    project: Path = typer.Option(
        Path("project.json"),
        "--project",
        "-p",
        help=PROJECT_OPTION_HELP
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output video path (defaults to <title>.mp4)"
    ),
    fps: Optional[int] = typer.Option(
        None,
        "--fps",
        help="Output frame rate",
        min=1,
        max=120
    ),
    encoder: EncoderChoice = typer.Option(
        EncoderChoice.DUMP,
        "--encoder",
        "-e",
        help="Encoder backend: dump frames then encode, or stream to ffmpeg"
    ),
    fonts: Optional[List[str]] = typer.Option(
        None,
        "--font",
        help=FONT_OPTION_HELP
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Render every scene in order and encode the result as a video."""
    from .render import ExportPipeline, SceneRenderer, create_encoder

    setup_logging(verbose)
    _register_fonts(fonts)
    store = _load_store(project)
    output = output or config.workspace / f"{store.project.file_stem}.mp4"

    pipeline = ExportPipeline(
        store,
        SceneRenderer(),
        encoder_factory=lambda: create_encoder(encoder.value),
        fps=fps,
    )

    last_scene = {"index": None}

    def report(job: ExportJob) -> None:
        if job.status == ExportStatus.CAPTURING and job.scene_index != last_scene["index"]:
            last_scene["index"] = job.scene_index
            typer.echo(f"   Scene {job.scene_index + 1}/{len(store)}...")
        elif job.status == ExportStatus.ENCODING:
            typer.echo(f"   Encoding {job.frame_counter} frames...")

    pipeline.on_progress(report)

    typer.echo(f"📼 Exporting {store.title} to {output} ({pipeline.fps} fps, {encoder.value} encoder)")
    try:
        job = asyncio.run(pipeline.export_video(output))
    except LuminaError as e:
        typer.echo(f"❌ Export failed: {e}")
        raise typer.Exit(1)

    typer.echo(f"✅ Video exported: {job.output_path}")
    typer.echo(f"   Duration: {job.metadata['duration']:.1f}s")
    typer.echo(f"   Frames: {job.frame_counter}")


if __name__ == "__main__":
    app()
