"""
Command line interface for the instance watcher.
"""

import logging

import click

from . import __version__
from .agent_factory import create_agent
from .application.dependency_container import DependencyContainer
from .application.scheduler import EXIT_CODE_RESTART, Scheduler
from .application.self_updater import SelfUpdater, UpdateOutcome
from .config.logging_config import configure_logging
from .config.watcher_config import WatcherConfig
from .domain.file_storage.storage_repository import IFileStorageRepository
from .domain.job_management import JobManager, JobStatus
from .domain.job_management.repositories import JobRepository
from .tasks.cleanup_task import cleanup_expired_jobs

logger = logging.getLogger(__name__)

EXIT_CODE_STARTUP_FAILURE = 1


def _bootstrap(ctx: click.Context) -> DependencyContainer:
    """Load configuration, configure logging and wire the agent."""
    if ctx.obj.get("container") is not None:
        return ctx.obj["container"]

    try:
        config = WatcherConfig()
        configure_logging(ctx.obj.get("log_level") or config.log_level, config.log_file)
        container = create_agent(config)
    except (ValueError, OSError) as e:
        click.echo(f"instance-watcher: startup failed: {e}", err=True)
        ctx.exit(EXIT_CODE_STARTUP_FAILURE)

    ctx.obj["container"] = container
    return container


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Override WATCHER_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, log_level):
    """instance-watcher - download job agent for provisioned instances"""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level


@cli.command()
@click.pass_context
def run(ctx):
    """Watch for jobs until SIGTERM/SIGINT or an applied update"""
    container = _bootstrap(ctx)
    config = container.resolve(WatcherConfig)
    logger.info(f"instance-watcher {__version__} watching {config.watch_dir}")

    exit_code = container.resolve(Scheduler).run()
    if exit_code == EXIT_CODE_RESTART:
        logger.info("Exiting for restart into the updated executable")
    ctx.exit(exit_code)


@cli.command()
@click.pass_context
def process(ctx):
    """Run a single scheduler tick and exit"""
    container = _bootstrap(ctx)
    scheduler = container.resolve(Scheduler)
    stats = scheduler.tick()

    if stats["update"]:
        click.echo(f"update: {stats['update']}")
    processing = stats["processing"]
    if processing is not None:
        click.echo(
            f"jobs: {processing['jobs_processed']} processed, "
            f"{processing['jobs_completed']} completed, {processing['jobs_failed']} failed"
        )
    cleanup = stats["cleanup"]
    if cleanup is not None:
        click.echo(
            f"cleanup: {cleanup['expired_jobs_removed']} records, "
            f"{cleanup['orphaned_files_cleaned']} orphaned files removed"
        )
    ctx.exit(scheduler.exit_code)


@cli.command()
@click.pass_context
def gc(ctx):
    """Remove expired job records and orphaned scratch files"""
    container = _bootstrap(ctx)
    stats = cleanup_expired_jobs(
        container.resolve(JobManager), container.resolve(IFileStorageRepository)
    )
    click.echo(
        f"Removed {stats['expired_jobs_removed']} expired job records and "
        f"{stats['orphaned_files_cleaned']} orphaned files"
    )
    for error in stats["errors"]:
        click.echo(f"error: {error}", err=True)


@cli.command(name="check-update")
@click.pass_context
def check_update(ctx):
    """Check for a newer release and install it"""
    container = _bootstrap(ctx)
    result = container.resolve(SelfUpdater).check_and_apply()

    remote = result.remote_version or "-"
    click.echo(
        f"{result.outcome.value}: local={result.local_version} remote={remote} {result.message}".rstrip()
    )
    if result.outcome == UpdateOutcome.APPLIED:
        ctx.exit(EXIT_CODE_RESTART)
    if result.outcome == UpdateOutcome.FAILED:
        ctx.exit(EXIT_CODE_STARTUP_FAILURE)


@cli.command()
@click.pass_context
def status(ctx):
    """Show job counts in the watch directory"""
    container = _bootstrap(ctx)
    config = container.resolve(WatcherConfig)
    repository = container.resolve(JobRepository)

    click.echo(f"version:   {__version__}")
    click.echo(f"watch dir: {config.watch_dir}")
    click.echo(f"pending:   {sum(1 for _ in repository.list_pending())}")
    for job_status in JobStatus.terminal_statuses():
        label = f"{job_status.value}:"
        click.echo(f"{label:<10} {len(repository.list_terminal(job_status))}")
    click.echo(f"updates:   {'enabled' if config.self_update_enabled else 'disabled'}")


@cli.command()
def version():
    """Print the agent version"""
    click.echo(__version__)


def main():
    cli(prog_name="instance-watcher", obj={})


if __name__ == "__main__":
    main()
