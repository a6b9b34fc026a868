import click


@click.group(invoke_without_command=True)
@click.pass_context
def main(ctx: click.Context) -> None:
    """firebase-env - Manage Cloud Functions environment config interactively."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(session)


@main.command()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Local config file (default: from FIREBASE_ENV_CONFIG_PATH or the per-platform config directory).",
)
@click.option("--project", default=None, help="Firebase project id (default: the firebase CLI's active project).")
@click.option("--log-level", default=None, help="Diagnostic log level (default: from FIREBASE_ENV_LOG_LEVEL or WARNING).")
@click.pass_context
def session(ctx: click.Context, config_path: str | None, project: str | None, log_level: str | None) -> None:
    """Start an interactive session."""
    import asyncio

    from firebase_env.runtime.app import run_app
    from firebase_env.runtime.log import setup_logging
    from firebase_env.runtime.settings import get_settings

    settings = get_settings()
    if project:
        settings = settings.model_copy(update={"project": project})
    setup_logging(log_level or settings.log_level)

    exit_code = asyncio.run(run_app(settings, config_path=config_path))
    ctx.exit(exit_code)


# ---------------------------------------------------------------------------
# Local config
# ---------------------------------------------------------------------------


@main.group()
def config() -> None:
    """Inspect the local firebase-env config file."""


@config.command()
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False), help="Local config file.")
def show(config_path: str | None) -> None:
    """Print the local config file."""
    from pathlib import Path

    from firebase_env.runtime.app import resolve_config_path
    from firebase_env.runtime.settings import get_settings

    path = resolve_config_path(get_settings(), config_path)
    if not Path(path).exists():
        raise click.ClickException(f"No config file at {path}. Start a session to create one.")
    click.echo(Path(path).read_text(encoding="utf-8"))


@config.command()
def path() -> None:
    """Print where the local config file is looked up."""
    from firebase_env.runtime.app import resolve_config_path
    from firebase_env.runtime.settings import get_settings

    click.echo(str(resolve_config_path(get_settings())))


if __name__ == "__main__":
    main()
