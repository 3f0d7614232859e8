"""MinerDeck CLI - command-line control of the local mining engine."""

from __future__ import annotations

import asyncio
import json

import click

from minerdeck.utils.logging import setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.pass_context
def cli(ctx: click.Context, debug: bool, json_output: bool) -> None:
    """MinerDeck - local CPU mining control."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["json_output"] = json_output
    setup_logging(level="DEBUG" if debug else "INFO", json_output=json_output)


def _settings():
    from minerdeck.config import load_settings
    from minerdeck.exceptions import ConfigError

    try:
        return load_settings()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show the resolved settings."""
    settings = _settings()
    data = settings.model_dump(mode="json", exclude={"storage_secret"})
    if ctx.obj.get("json_output"):
        click.echo(json.dumps(data, indent=2))
    else:
        for key, value in data.items():
            click.echo(f"  {key:<14} {value}")


@cli.command()
@click.pass_context
def backends(ctx: click.Context) -> None:
    """Show usable engine backends."""
    from minerdeck.engine import available_backends

    settings = _settings()
    avail = available_backends(settings)
    if ctx.obj.get("json_output"):
        click.echo(json.dumps({"available": avail, "selected": settings.backend.value}))
    else:
        click.echo("Available backends:")
        for name in avail:
            click.echo(f"  - {name}")
        if "process" not in avail:
            click.echo(f"  (miner binary '{settings.miner_path}' not found; set MINERDECK_MINER_PATH)")


@cli.command()
@click.option("--interval", type=int, default=2000, help="Sampling interval in ms")
@click.option("--count", type=int, default=0, help="Number of samples (0=until Ctrl-C)")
@click.pass_context
def run(ctx: click.Context, interval: int, count: int) -> None:
    """Start mining and print the session state until stopped."""
    settings = _settings()
    try:
        asyncio.run(_run_session(settings, interval, count, ctx.obj.get("json_output", False)))
    except KeyboardInterrupt:
        pass


async def _run_session(settings, interval: int, count: int, json_output: bool) -> None:
    from minerdeck.engine import create_engine
    from minerdeck.exceptions import CommandRejectedError
    from minerdeck.models.session import SessionStatus
    from minerdeck.session import JsonFileHintStore, MinerSession, format_hashrate

    engine = create_engine(settings)
    session = MinerSession(
        engine,
        JsonFileHintStore(settings.hint_path),
        query_timeout=settings.query_timeout,
    )
    await session.mount()

    try:
        if session.session.status == SessionStatus.IDLE:
            try:
                await session.start()
            except CommandRejectedError as exc:
                raise click.ClickException(f"Start rejected: {exc}") from exc

        samples = 0
        while count == 0 or samples < count:
            await asyncio.sleep(interval / 1000)
            samples += 1
            view = session.view()
            if json_output:
                click.echo(json.dumps(view.model_dump(mode="json")))
            else:
                detail = view.message or format_hashrate(view.hashrate)
                click.echo(
                    f"[{samples}] {view.status.value:<9} {detail:<28} "
                    f"algo={view.algorithm or '--'}"
                )
    finally:
        try:
            await session.stop()
        except CommandRejectedError as exc:
            click.echo(f"Stop rejected: {exc}", err=True)
        session.unmount()
        await engine.shutdown()


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address (0.0.0.0 for network access)")
@click.option("--port", type=int, default=8000, help="HTTP port")
@click.option("--no-ui", is_flag=True, help="API only, no web dashboard")
def serve(host: str, port: int, no_ui: bool) -> None:
    """Start the web server (API + dashboard)."""
    import uvicorn
    from minerdeck.api.app import create_app

    app = create_app(enable_ui=not no_ui, settings=_settings())
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    cli()
