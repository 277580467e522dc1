"""
Main CLI interface for Station Tracks

Command-line front end over the track engine, built with Click:
- Browsing: list, search, groups
- Administration: add, update, delete
- Live: watch (stream tracks as they are played)

Every command builds a TrackEngine from the loaded settings, runs one asyncio
event loop for its duration and closes the engine afterwards.
"""

import asyncio
import functools
import sys
from datetime import datetime, timezone
from typing import Iterable, Optional

import click

from .config.settings import get_settings, reload_settings
from .core.outcome import Outcome
from .engine import TrackEngine
from .tracks.models import Track
from .utils.helpers import format_timestamp, truncate_string
from .utils.logger import configure_from_settings, get_logger

logger = get_logger(__name__)

DATE_FORMATS = ['%Y-%m-%d', '%Y-%m-%d %H:%M', '%Y-%m-%dT%H:%M:%S']


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\nStopped by user", fg='yellow'))
            sys.exit(130)
        except click.ClickException:
            raise
        except Exception as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def local_to_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Interpret a naive command-line datetime as local time and convert it to UTC"""
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.astimezone(timezone.utc)


def format_track(track: Track) -> str:
    """Single display line for a track"""
    played = format_timestamp(track.played_at)
    if track.is_event:
        return click.style(f"{track.id:>7}  {played}  [Event] {track.artist}", fg='magenta')
    group = f"[{track.group}] " if track.group else ""
    return f"{track.id:>7}  {played}  {group}{truncate_string(track.display_name, 80)}"


def echo_tracks(tracks: Iterable[Track]) -> None:
    count = 0
    for track in tracks:
        click.echo(format_track(track))
        count += 1
    if count == 0:
        click.echo(click.style("No tracks found", fg='yellow'))


def check_outcome(outcome: Outcome, action: str) -> None:
    """Turn a failed outcome into a CLI error"""
    if not outcome.ok:
        status = outcome.status if outcome.status is not None else 'no response'
        raise click.ClickException(f"{action} failed ({status}): {outcome.error}")
    if outcome.inconsistent:
        click.echo(click.style(f"{action} succeeded, but the track was not in the loaded pages", fg='yellow'))


async def _load_pages(engine: TrackEngine, pages: int) -> None:
    check_outcome(await engine.pagination.search(), "Listing")
    for _ in range(pages - 1):
        if not engine.pagination.has_more:
            break
        check_outcome(await engine.pagination.load_more(), "Listing")


@click.group()
@click.option('--config', type=click.Path(exists=True, dir_okay=False), help='Path to config file')
@click.option('--underground/--fm', default=None, help='Channel to work with (default from config)')
@click.option('--verbose', '-v', is_flag=True, help='Show all log records, DEBUG included, on the console')
@click.pass_context
def cli(ctx, config, underground, verbose):
    """
    Station Tracks - browse and follow a radio station's track log
    """
    ctx.ensure_object(dict)

    settings = reload_settings(config) if config else get_settings()
    if underground is not None:
        settings.server.underground = underground
    if verbose:
        settings.logging.level = 'DEBUG'

    problems = settings.validate()
    if problems:
        raise click.ClickException("Invalid configuration:\n  - " + "\n  - ".join(problems))

    configure_from_settings(verbose=verbose)
    ctx.obj['settings'] = settings


@cli.command(name='list')
@click.option('--pages', '-p', type=click.IntRange(min=1), default=1, help='Number of pages to load')
@click.pass_context
@handle_error
def list_tracks(ctx, pages):
    """List the most recently played tracks"""
    async def run():
        async with TrackEngine(ctx.obj['settings']) as engine:
            await _load_pages(engine, pages)
            echo_tracks(engine.tracks)

    asyncio.run(run())


@cli.command()
@click.option('--artist', '-a', help='Artist to search for')
@click.option('--title', '-t', help='Title to search for')
@click.option('--start', type=click.DateTime(DATE_FORMATS), help='Played at or after (local time)')
@click.option('--end', type=click.DateTime(DATE_FORMATS), help='Played at or before (local time)')
@click.pass_context
@handle_error
def search(ctx, artist, title, start, end):
    """Search the track log; the date range needs both --start and --end"""
    if (start is None) != (end is None):
        click.echo(click.style("Both --start and --end are needed for a date range; ignoring it", fg='yellow'))

    async def run():
        async with TrackEngine(ctx.obj['settings']) as engine:
            outcome = await engine.pagination.search(artist, title, local_to_utc(start), local_to_utc(end))
            check_outcome(outcome, "Search")
            echo_tracks(engine.tracks)

    asyncio.run(run())


@cli.command()
@click.pass_context
@handle_error
def groups(ctx):
    """Show the groups tracks can belong to"""
    async def run():
        async with TrackEngine(ctx.obj['settings']) as engine:
            names = await engine.pagination.get_groups()
            if not names:
                click.echo(click.style("No groups available", fg='yellow'))
            for name in names:
                click.echo(name)

    asyncio.run(run())


@cli.command()
@click.option('--title', '-t', default='', help='Track title')
@click.option('--artist', '-a', required=True, help='Artist, or the event description with --event')
@click.option('--group', '-g', default='', help='Track group')
@click.option('--time', 'played_at', type=click.DateTime(DATE_FORMATS), help='Played at (local time, default now)')
@click.option('--event', is_flag=True, help='Add an event instead of a song')
@click.pass_context
@handle_error
def add(ctx, title, artist, group, played_at, event):
    """Add a track or event to the log"""
    moment = local_to_utc(played_at) or datetime.now(timezone.utc)

    async def run():
        async with TrackEngine(ctx.obj['settings']) as engine:
            check_outcome(await engine.pagination.add(title, artist, group, moment, is_event=event), "Add")
            click.echo(click.style("Added:", fg='green'))
            echo_tracks(engine.tracks[:1])

    asyncio.run(run())


@cli.command()
@click.argument('track_id', type=int)
@click.option('--title', '-t', required=True, help='New title')
@click.option('--artist', '-a', default='', help='New artist (ignored for events)')
@click.option('--group', '-g', default='', help='New group (ignored for events)')
@click.option('--time', 'played_at', type=click.DateTime(DATE_FORMATS), required=True, help='New played-at time (local)')
@click.option('--pages', '-p', type=click.IntRange(min=1), default=3, help='Pages to search for the track first')
@click.pass_context
@handle_error
def update(ctx, track_id, title, artist, group, played_at, pages):
    """Edit a track in the log"""
    async def run():
        async with TrackEngine(ctx.obj['settings']) as engine:
            await _load_pages(engine, pages)
            outcome = await engine.pagination.update(track_id, title, artist, group, local_to_utc(played_at))
            check_outcome(outcome, "Update")
            track = engine.coordinator.find(track_id)
            if track is not None:
                click.echo(click.style("Updated:", fg='green'))
                echo_tracks([track])

    asyncio.run(run())


@cli.command()
@click.argument('track_id', type=int)
@click.option('--pages', '-p', type=click.IntRange(min=1), default=3, help='Pages to search for the track')
@click.confirmation_option(prompt='Delete this track from the log?')
@click.pass_context
@handle_error
def delete(ctx, track_id, pages):
    """Delete a track from the log"""
    async def run():
        async with TrackEngine(ctx.obj['settings']) as engine:
            await _load_pages(engine, pages)
            track = engine.coordinator.find(track_id)
            if track is None:
                raise click.ClickException(f"Track {track_id} not found in the last {pages} page(s)")
            check_outcome(await engine.pagination.delete(track), "Delete")
            click.echo(click.style(f"Deleted: {format_track(track)}", fg='green'))

    asyncio.run(run())


@cli.command()
@click.option('--request-current', is_flag=True, help='Ask for the currently playing track once connected')
@click.option('--history', type=click.IntRange(min=0), default=5, help='Recent tracks to show before following')
@click.pass_context
@handle_error
def watch(ctx, request_current, history):
    """Follow the station live, printing tracks as they are played"""
    settings = ctx.obj['settings']
    if not settings.websocket_url:
        raise click.ClickException("No websocket_url configured; live updates are disabled")

    def on_track(track: Track) -> None:
        click.echo(format_track(track))

    async def run():
        async with TrackEngine(settings, on_stream_track=on_track) as engine:
            outcome = await engine.start()
            if outcome.ok:
                echo_tracks(reversed(engine.tracks[:history]))
            channel = 'underground' if engine.underground else 'FM'
            click.echo(click.style(f"Following {channel} live, Ctrl+C to stop", fg='cyan'))
            if request_current and not engine.live.request_current_track():
                click.echo(click.style("Stream not open, could not request current track", fg='yellow'))
            await asyncio.Event().wait()

    asyncio.run(run())


def main() -> None:
    cli(obj={})


if __name__ == '__main__':
    main()
