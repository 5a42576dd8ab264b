"""CLI entry point for podplay."""

import json
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from podplay.config.logging import setup_logging
from podplay.config.manager import ConfigManager
from podplay.config.schema import GlobalConfig
from podplay.feeds.filtering import EpisodeQuery, extract_keywords, paginate, total_pages
from podplay.feeds.models import PodcastFeed
from podplay.feeds.parser import RSSParser
from podplay.playback.played import PlayedStateStore
from podplay.storage import StateFile
from podplay.utils.display import format_duration, strip_html, truncate_text
from podplay.utils.errors import ConfigError, FeedError, PodplayError
from podplay.utils.paths import get_log_file

app = typer.Typer(
    name="podplay",
    help="Browse and play a podcast feed from the terminal",
    no_args_is_help=True,
)
config_app = typer.Typer(name="config", help="Show or change podplay configuration")
app.add_typer(config_app)

console = Console()


class SortOrder(str, Enum):
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose (DEBUG) logging"
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file"
    ),
) -> None:
    """podplay - browse and play a podcast feed."""
    ctx.obj = {"verbose": verbose, "log_file": log_file}
    setup_logging(verbose=verbose, log_file=log_file)


def _load_config() -> GlobalConfig:
    try:
        return ConfigManager().load_config()
    except ConfigError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)


def _load_feed(config: GlobalConfig) -> PodcastFeed:
    parser = RSSParser(
        timeout=config.feed_timeout_seconds, fallback_title=config.fallback_title
    )
    try:
        return parser.fetch(config.feed_url)
    except FeedError as e:
        console.print(f"[red]✗[/red] Feed unavailable: {e}")
        console.print(f"[dim]  Feed URL: {config.feed_url}[/dim]")
        sys.exit(1)


def _format_millis(millis: int) -> str:
    if millis <= 0:
        return "-"
    return datetime.fromtimestamp(millis / 1000).strftime("%Y-%m-%d %H:%M")


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from podplay import __version__

    console.print(f"[bold cyan]podplay[/bold cyan] v{__version__}")


@app.command("episodes")
def list_episodes(
    search: Annotated[
        str, typer.Option("--search", "-s", help="Text to find in title or description")
    ] = "",
    keyword: Annotated[
        list[str] | None,
        typer.Option("--keyword", "-k", help="Keyword that must match (repeatable)"),
    ] = None,
    sort: Annotated[
        SortOrder | None,
        typer.Option("--sort", help="date-desc (newest first) or date-asc"),
    ] = None,
    show_played: Annotated[
        bool | None,
        typer.Option("--show-played/--hide-played", help="Include played episodes"),
    ] = None,
    page: Annotated[int, typer.Option("--page", "-p", help="Page number", min=1)] = 1,
    details: Annotated[
        bool, typer.Option("--details", "-d", help="Show the feed and episode descriptions")
    ] = False,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """List episodes of the configured feed.

    Examples:
        podplay episodes --search kubernetes

        podplay episodes --details --page 2

        podplay episodes -k AI -k Azure --sort date-asc --show-played
    """
    config = _load_config()
    feed = _load_feed(config)
    store = PlayedStateStore(StateFile())

    query = EpisodeQuery(
        search=search,
        keywords=list(keyword or []),
        show_played=config.view.show_played if show_played is None else show_played,
        sort=sort.value if sort else config.view.default_sort,
    )
    filtered = query.apply(feed.episodes, store.is_played)
    page_size = config.view.page_size
    pages = total_pages(len(filtered), page_size)
    episodes = paginate(filtered, page, page_size)

    if json_output:
        result = {
            "title": feed.title,
            "description": strip_html(feed.description),
            "page": page,
            "pages": pages,
            "total": len(filtered),
            "episodes": [
                {**episode.model_dump(), "played": store.is_played(episode.id)}
                for episode in episodes
            ],
        }
        print(json.dumps(result, indent=2))
        return

    if not episodes:
        console.print("[yellow]No episodes match your search or filters.[/yellow]")
        console.print("[dim]Try a different search or clear the keyword filters.[/dim]")
        return

    if details and feed.description:
        console.print(f"[dim]{escape(truncate_text(strip_html(feed.description), 200))}[/dim]\n")

    table = Table(title=f"[bold]{escape(feed.title)}[/bold]")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Date", style="green", no_wrap=True)
    table.add_column("Title")
    table.add_column("Duration", justify="right")
    table.add_column("Played", justify="center", style="yellow")
    if details:
        table.add_column("Description", style="dim")

    for episode in episodes:
        published = episode.published
        row = [
            escape(truncate_text(episode.id, 40)),
            published.strftime("%b %d, %Y") if published else "-",
            escape(episode.title),
            format_duration(episode.duration) or "-",
            "✓" if store.is_played(episode.id) else "",
        ]
        if details:
            row.append(escape(truncate_text(episode.plain_description, 80)))
        table.add_row(*row)

    console.print(table)
    summary = f"{len(filtered)} episode(s)"
    if len(filtered) < len(feed.episodes):
        summary += f" of {len(feed.episodes)} total"
    console.print(f"\n[dim]Page {page} of {pages} · {summary}[/dim]")


@app.command("keywords")
def list_keywords() -> None:
    """List the topic keywords found in the feed."""
    config = _load_config()
    feed = _load_feed(config)
    keywords = extract_keywords(feed.episodes)

    if not keywords:
        console.print("[yellow]No keywords found.[/yellow]")
        return
    for keyword in keywords:
        console.print(f"  • {escape(keyword)}")


@app.command("toggle-played")
def toggle_played(
    episode_id: Annotated[str, typer.Argument(help="Episode ID (see 'podplay episodes')")],
) -> None:
    """Mark an episode played, or unplayed if it already was."""
    store = PlayedStateStore(StateFile())
    if store.toggle_played(episode_id):
        console.print(f"[green]✓[/green] Marked '[bold]{escape(episode_id)}[/bold]' as played")
    else:
        console.print(f"[green]✓[/green] Marked '[bold]{escape(episode_id)}[/bold]' as unplayed")


@app.command("mark-played")
def mark_played(
    episode_id: Annotated[str, typer.Argument(help="Episode ID (see 'podplay episodes')")],
) -> None:
    """Mark an episode played and move it to the top of the history."""
    store = PlayedStateStore(StateFile())
    store.mark_as_playing(episode_id)
    console.print(f"[green]✓[/green] Marked '[bold]{escape(episode_id)}[/bold]' as played")


@app.command("recent")
def recent(
    limit: Annotated[
        int, typer.Option("--limit", "-n", help="Number of episodes to show", min=0)
    ] = 5,
) -> None:
    """Show recently played episodes, most recent first."""
    store = PlayedStateStore(StateFile())
    episode_ids = store.get_recently_played(limit)

    if not episode_ids:
        console.print("[yellow]Nothing played yet.[/yellow]")
        return

    table = Table(title="[bold]Recently played[/bold]")
    table.add_column("ID", style="cyan")
    table.add_column("Last played", style="green")
    for episode_id in episode_ids:
        table.add_row(escape(episode_id), _format_millis(store.last_played(episode_id) or 0))
    console.print(table)


@app.command("play")
def play(
    ctx: typer.Context,
    episode_id: Annotated[
        str | None, typer.Argument(help="Episode to start with")
    ] = None,
) -> None:
    """Open the player UI.

    Keys: space play/pause, ←/→ skip 10s, p toggle played, q quit.
    """
    from podplay.tui import PodplayApp

    config = _load_config()
    options = ctx.obj or {}
    # The UI owns the terminal, so logs always go to a file
    setup_logging(
        verbose=options.get("verbose", False),
        log_file=options.get("log_file") or get_log_file(),
        level=config.log_level,
    )

    try:
        PodplayApp(config, initial_episode_id=episode_id).run()
    except PodplayError as e:
        console.print(f"[red]✗[/red] Error: {e}")
        sys.exit(1)
    except OSError as e:
        # libmpv missing or unloadable
        console.print(f"[red]✗[/red] Could not start audio playback: {e}")
        console.print("[dim]  podplay needs libmpv installed (e.g. apt install libmpv2)[/dim]")
        sys.exit(1)


@config_app.command("show")
def config_show() -> None:
    """Display current configuration."""
    manager = ConfigManager()
    config = _load_config()

    console.print(f"[dim]{manager.config_file}[/dim]\n")
    table = Table(show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    def add_rows(data: dict, prefix: str = "") -> None:
        for key, value in data.items():
            if isinstance(value, dict):
                add_rows(value, f"{prefix}{key}.")
            else:
                table.add_row(f"{prefix}{key}", escape(str(value)))

    add_rows(config.model_dump(mode="json"))
    console.print(table)


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Config key, e.g. player.keyboard_skip_seconds")],
    value: Annotated[str, typer.Argument(help="New value")],
) -> None:
    """Set a configuration value.

    Examples:
        podplay config set log_level DEBUG

        podplay config set view.page_size 20
    """
    try:
        ConfigManager().set_value(key, value)
    except ConfigError as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    console.print(f"[green]✓[/green] {key} = {escape(value)}")


if __name__ == "__main__":
    app()
