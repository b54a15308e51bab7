"""Thin CLI wrapper for jobparam.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from typing import TYPE_CHECKING, Annotated, Any

import typer
from rich.console import Console

from jobparam import __version__
from jobparam.config import get_settings, print_settings_json

if TYPE_CHECKING:
    from sqlalchemy.orm import Session, sessionmaker

    from jobparam.jobs.models import Run
    from jobparam.parameters.definition import JobBuildNameParameterDefinition
    from jobparam.types import RunResult

app = typer.Typer(
    name="jobparam",
    help="Job build-name parameters - offer recent successful builds as choices",
    no_args_is_help=True,
)
console = Console()

JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]
PrincipalOption = Annotated[
    str | None,
    typer.Option(
        "--as",
        help="Act as this principal (default: configured principal, "
        "or the unrestricted system context)",
    ),
]


def _print_json(data: object) -> None:
    # Unwrapped and unstyled so the output parses
    console.print(
        json.dumps(data, indent=2), soft_wrap=True, markup=False, highlight=False
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"jobparam version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Job build-name parameters - offer recent successful builds as choices."""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def config(json_output: JsonOption = False) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings), soft_wrap=True, markup=False)
    else:
        principal_display = settings.default_principal or "(system context)"
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Storage:[/bold]")
        console.print(f"  Database URL:        {settings.db_url}")
        console.print()
        console.print("[bold]Operational:[/bold]")
        console.print(f"  Log level:           {settings.log_level}")
        console.print(f"  Default principal:   {principal_display}")
        console.print()
        console.print("[bold]Parameter defaults:[/bold]")
        console.print(f"  Max results:         {settings.default_max_results}")
        console.print(f"  Fallback value:      {settings.fallback_value}")


def _session_factory() -> "sessionmaker[Session]":
    from jobparam.db import create_all_tables, get_engine, get_session_factory

    engine = get_engine()
    create_all_tables(engine)
    return get_session_factory(engine)


def _principal(as_principal: str | None) -> str | None:
    if as_principal is not None:
        return as_principal
    return get_settings().default_principal


# Job management


jobs_app = typer.Typer(help="Manage jobs and read grants")
app.add_typer(jobs_app, name="jobs")


@jobs_app.command("list")
def jobs_list(
    as_principal: PrincipalOption = None,
    json_output: JsonOption = False,
) -> None:
    """List jobs visible to the acting principal."""
    from jobparam.jobs.directory import SqlJobDirectory

    factory = _session_factory()
    with factory() as session:
        directory = SqlJobDirectory(session, _principal(as_principal))
        jobs = directory.all_jobs()

        if json_output:
            output = [
                {
                    "full_name": j.full_name,
                    "name": j.name,
                    "description": j.description,
                }
                for j in jobs
            ]
            _print_json(output)
            return

        if not jobs:
            console.print("[yellow]No jobs found[/yellow]")
            return

        console.print(f"[bold]Found {len(jobs)} job(s):[/bold]")
        for j in jobs:
            console.print(f"  [green]{j.full_name}[/green]")
            if j.description:
                console.print(f"    {j.description}")


@jobs_app.command("create")
def jobs_create(
    full_name: Annotated[str, typer.Argument(help="Job path, e.g. team/app/build")],
    description: Annotated[
        str | None,
        typer.Option("--description", "-d", help="Job description"),
    ] = None,
) -> None:
    """Register a job."""
    from jobparam.jobs.service import JobExistsError, create_job

    factory = _session_factory()
    with factory() as session:
        try:
            job = create_job(session, full_name, description=description)
        except (JobExistsError, ValueError) as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(code=1) from None
        session.commit()
        console.print(f"[green]Created job {job.full_name}[/green]")


@jobs_app.command("show")
def jobs_show(
    full_name: Annotated[str, typer.Argument(help="Job full name")],
    limit: Annotated[
        int, typer.Option("--limit", "-n", min=1, help="Runs to show")
    ] = 20,
    json_output: JsonOption = False,
) -> None:
    """Show a job and its most recent runs."""
    from jobparam.jobs.service import JobNotFoundError, get_job, list_runs

    factory = _session_factory()
    with factory() as session:
        try:
            job = get_job(session, full_name)
            runs = list_runs(session, full_name, limit=limit)
        except JobNotFoundError:
            console.print(f"[red]Job not found: {full_name}[/red]")
            raise typer.Exit(code=1) from None

        if json_output:
            output = {
                "full_name": job.full_name,
                "name": job.name,
                "description": job.description,
                "runs": [_run_to_dict(r) for r in runs],
            }
            _print_json(output)
            return

        console.print(f"[bold]{job.full_name}[/bold]")
        if job.description:
            console.print(f"  {job.description}")
        console.print()
        if not runs:
            console.print("[yellow]No runs recorded[/yellow]")
        for r in runs:
            console.print(f"  {_run_label(r)}")


@jobs_app.command("delete")
def jobs_delete(
    full_name: Annotated[str, typer.Argument(help="Job full name")],
) -> None:
    """Delete a job with its runs and grants."""
    from jobparam.jobs.service import JobNotFoundError, delete_job

    factory = _session_factory()
    with factory() as session:
        try:
            delete_job(session, full_name)
        except JobNotFoundError:
            console.print(f"[red]Job not found: {full_name}[/red]")
            raise typer.Exit(code=1) from None
        session.commit()
        console.print(f"[green]Deleted job {full_name}[/green]")


@jobs_app.command("import")
def jobs_import(
    path: Annotated[str, typer.Argument(help="Path to a YAML/JSON job file")],
) -> None:
    """Import jobs and run histories from a file."""
    from pathlib import Path

    from jobparam.jobs.io import import_jobs_from_file

    file_path = Path(path)
    if not file_path.exists():
        console.print(f"[red]Path not found: {path}[/red]")
        raise typer.Exit(code=1)

    factory = _session_factory()
    with factory() as session:
        try:
            result = import_jobs_from_file(session, file_path)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(code=1) from None
        session.commit()

        console.print("[bold]Import results:[/bold]")
        console.print(f"  Total: {result.total}")
        console.print(f"  [green]Succeeded: {result.succeeded}[/green]")
        if result.failed > 0:
            console.print(f"  [red]Failed: {result.failed}[/red]")
            for r in result.results:
                if not r.success:
                    console.print(f"    - {r.full_name}: {r.error}")
            raise typer.Exit(code=1)


@jobs_app.command("grant")
def jobs_grant(
    principal: Annotated[str, typer.Argument(help="Principal to grant read access")],
    full_name: Annotated[
        str | None,
        typer.Argument(help="Job full name (omit to grant access to all jobs)"),
    ] = None,
) -> None:
    """Grant a principal read access to a job or to all jobs."""
    from jobparam.jobs.service import JobNotFoundError, grant_read

    factory = _session_factory()
    with factory() as session:
        try:
            grant_read(session, principal, full_name)
        except JobNotFoundError:
            console.print(f"[red]Job not found: {full_name}[/red]")
            raise typer.Exit(code=1) from None
        session.commit()
        console.print(
            f"[green]Granted {principal} read on {full_name or 'all jobs'}[/green]"
        )


@jobs_app.command("revoke")
def jobs_revoke(
    principal: Annotated[str, typer.Argument(help="Principal to revoke")],
    full_name: Annotated[
        str | None,
        typer.Argument(help="Job full name (omit for the all-jobs grant)"),
    ] = None,
) -> None:
    """Revoke a read grant."""
    from jobparam.jobs.service import JobNotFoundError, revoke_read

    factory = _session_factory()
    with factory() as session:
        try:
            removed = revoke_read(session, principal, full_name)
        except JobNotFoundError:
            console.print(f"[red]Job not found: {full_name}[/red]")
            raise typer.Exit(code=1) from None
        session.commit()
        if removed:
            target = full_name or "all jobs"
            console.print(f"[green]Revoked {principal} read on {target}[/green]")
        else:
            console.print("[yellow]No matching grant[/yellow]")


# Run history


runs_app = typer.Typer(help="Record and list job runs")
app.add_typer(runs_app, name="runs")


def _run_to_dict(run: "Run") -> dict[str, object]:
    return {
        "number": run.number,
        "display_name": run.display_name,
        "building": run.building,
        "result": run.result_value,
        "started_at": run.started_at.isoformat() if run.started_at else None,
        "finished_at": run.finished_at.isoformat() if run.finished_at else None,
    }


def _run_label(run: "Run") -> str:
    if run.building:
        return f"[blue]{run.display_name}[/blue] (building)"
    color = {
        "success": "green",
        "unstable": "yellow",
        "failure": "red",
        "aborted": "white",
    }.get(run.result_value or "", "white")
    return f"[{color}]{run.display_name}[/{color}] ({run.result_value or 'no result'})"


def _parse_result(result: str | None) -> "RunResult | None":
    from jobparam.types import RunResult

    if result is None:
        return None
    try:
        return RunResult(result.lower())
    except ValueError:
        console.print(f"[red]Invalid result: {result}[/red]")
        console.print("Valid values: " + ", ".join(r.value for r in RunResult))
        raise typer.Exit(code=1) from None


@runs_app.command("record")
def runs_record(
    full_name: Annotated[str, typer.Argument(help="Job full name")],
    result: Annotated[
        str | None,
        typer.Option(
            "--result",
            "-r",
            help="success, unstable, failure, not_built, or aborted",
        ),
    ] = None,
    display_name: Annotated[
        str | None,
        typer.Option("--name", help="Display name for the run"),
    ] = None,
    building: Annotated[
        bool,
        typer.Option("--building", help="Record the run as still in progress"),
    ] = False,
) -> None:
    """Append a run to a job's history."""
    from jobparam.jobs.service import JobNotFoundError, record_run

    run_result = _parse_result(result)

    factory = _session_factory()
    with factory() as session:
        try:
            run = record_run(
                session,
                full_name,
                result=run_result,
                display_name=display_name,
                building=building,
            )
        except JobNotFoundError:
            console.print(f"[red]Job not found: {full_name}[/red]")
            raise typer.Exit(code=1) from None
        session.commit()
        console.print(f"Recorded {full_name} {_run_label(run)}")


@runs_app.command("finish")
def runs_finish(
    full_name: Annotated[str, typer.Argument(help="Job full name")],
    number: Annotated[int, typer.Argument(help="Run number")],
    result: Annotated[
        str | None,
        typer.Option("--result", "-r", help="Outcome (omit for no result)"),
    ] = None,
) -> None:
    """Finish an in-progress run."""
    from jobparam.jobs.service import JobNotFoundError, RunNotFoundError, finish_run

    run_result = _parse_result(result)

    factory = _session_factory()
    with factory() as session:
        try:
            run = finish_run(session, full_name, number, run_result)
        except (JobNotFoundError, RunNotFoundError) as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(code=1) from None
        session.commit()
        console.print(f"Finished {full_name} {_run_label(run)}")


@runs_app.command("list")
def runs_list(
    full_name: Annotated[str, typer.Argument(help="Job full name")],
    limit: Annotated[
        int, typer.Option("--limit", "-n", min=1, help="Maximum results")
    ] = 100,
    json_output: JsonOption = False,
) -> None:
    """List a job's runs, newest first."""
    from jobparam.jobs.service import JobNotFoundError, list_runs

    factory = _session_factory()
    with factory() as session:
        try:
            runs = list_runs(session, full_name, limit=limit)
        except JobNotFoundError:
            console.print(f"[red]Job not found: {full_name}[/red]")
            raise typer.Exit(code=1) from None

        if json_output:
            _print_json([_run_to_dict(r) for r in runs])
            return
        if not runs:
            console.print("[yellow]No runs recorded[/yellow]")
        for r in runs:
            console.print(f"  {_run_label(r)}")


# Parameter queries


param_app = typer.Typer(help="Query job build-name parameters")
app.add_typer(param_app, name="param")


def _definition(
    job_name: str,
    name: str,
    max_results: int | None,
    fallback_value: str | None,
) -> "JobBuildNameParameterDefinition":
    from jobparam.parameters.definition import JobBuildNameParameterDefinition

    data: dict[str, Any] = {"name": name, "job_name": job_name}
    if max_results is not None:
        data["max_results"] = max_results
    if fallback_value is not None:
        data["fallback_value"] = fallback_value
    return JobBuildNameParameterDefinition.from_dict(data, get_settings())


JobNameArgument = Annotated[str, typer.Argument(help="Source job reference")]
ParamNameOption = Annotated[
    str, typer.Option("--param-name", help="Parameter name")
]
MaxResultsOption = Annotated[
    int | None,
    typer.Option(
        "--max-results", "-n", min=0, help="Build names to offer (0 = default)"
    ),
]
FallbackOption = Annotated[
    str | None,
    typer.Option("--fallback", help="Value offered when nothing qualifies"),
]


@param_app.command("choices")
def param_choices(
    job_name: JobNameArgument,
    name: ParamNameOption = "BUILD_NAME",
    max_results: MaxResultsOption = None,
    fallback_value: FallbackOption = None,
    as_principal: PrincipalOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show the build names offered for a source job."""
    from jobparam.jobs.directory import SqlJobDirectory
    from jobparam.parameters.resolver import BuildNameResolver

    definition = _definition(job_name, name, max_results, fallback_value)
    factory = _session_factory()
    with factory() as session:
        directory = SqlJobDirectory(session, _principal(as_principal))
        resolver = BuildNameResolver(directory)
        choices = resolver.get_choices(definition)

    if json_output:
        _print_json(choices)
    else:
        for choice in choices:
            console.print(choice, markup=False, highlight=False)


@param_app.command("default")
def param_default(
    job_name: JobNameArgument,
    name: ParamNameOption = "BUILD_NAME",
    max_results: MaxResultsOption = None,
    fallback_value: FallbackOption = None,
    as_principal: PrincipalOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show the default parameter value for a source job."""
    from jobparam.jobs.directory import SqlJobDirectory
    from jobparam.parameters.resolver import BuildNameResolver

    definition = _definition(job_name, name, max_results, fallback_value)
    factory = _session_factory()
    with factory() as session:
        directory = SqlJobDirectory(session, _principal(as_principal))
        resolver = BuildNameResolver(directory)
        value = resolver.default_parameter_value(definition)

    if json_output:
        _print_json(value.to_dict())
    else:
        console.print(f"{value.name}={value.value}")


@param_app.command("check")
def param_check(
    job_name: JobNameArgument,
    as_principal: PrincipalOption = None,
    json_output: JsonOption = False,
) -> None:
    """Check that a job reference resolves."""
    from jobparam.jobs.directory import AccessDeniedError, SqlJobDirectory
    from jobparam.parameters.descriptor import check_job_name

    factory = _session_factory()
    with factory() as session:
        directory = SqlJobDirectory(session, _principal(as_principal))
        try:
            directory.require_read()
        except AccessDeniedError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(code=1) from None
        validation = check_job_name(directory, job_name)

    if json_output:
        _print_json(validation.to_dict())
    elif validation.is_ok:
        console.print(f"[green]OK: {job_name}[/green]")
    else:
        console.print(f"[red]{validation.message}[/red]")

    if not validation.is_ok:
        raise typer.Exit(code=1)


@param_app.command("suggest")
def param_suggest(
    value: Annotated[
        str, typer.Argument(help="Text to match against job names")
    ] = "",
    as_principal: PrincipalOption = None,
    json_output: JsonOption = False,
) -> None:
    """Suggest job names for auto-completion."""
    from jobparam.jobs.directory import SqlJobDirectory
    from jobparam.parameters.descriptor import suggest_job_names

    factory = _session_factory()
    with factory() as session:
        directory = SqlJobDirectory(session, _principal(as_principal))
        names = suggest_job_names(directory, value)

    if json_output:
        _print_json(names)
    else:
        for n in names:
            console.print(n, markup=False, highlight=False)


if __name__ == "__main__":
    app()
