# ==============================================
# CLI — Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Provides command-line access to the Metadata API client.
#   Connection settings come from SF_* environment variables / .env.
#
# COMMANDS:
# ---------
# 1. Read definitions:
#    sfmeta read CustomObject Account__c Other__c
#
# 2. Create / update / upsert from a JSON file (record or list):
#    sfmeta create CustomObject objects.json
#
# 3. Rename / delete:
#    sfmeta rename CustomObject Old__c New__c
#    sfmeta delete CustomObject Old__c
#
# 4. List components of a type:
#    sfmeta list CustomObject
#
# 5. Deploy a package zip and wait for it:
#    sfmeta deploy MyPackage.zip --run-test MyApexTriggerTest
#
# 6. Retrieve a package to a zip file:
#    sfmeta retrieve --package "My Test Package" --output out.zip
#
# ==============================================

import json
import sys

import click
import requests

from sfmeta.connection import Connection
from sfmeta.errors import MetadataClientError
from sfmeta.metadata import DeployStatus, MetadataClient


def _client() -> MetadataClient:
    return MetadataClient(Connection.from_config())


def _echo_results(results) -> bool:
    # Print one line per result, return True if all succeeded
    if not isinstance(results, list):
        results = [results]
    ok = True
    for result in results:
        if result.success:
            created = ""
            if result.created is not None:
                created = " (created)" if result.created else " (updated)"
            click.echo(f"✓ {result.full_name}{created}")
        else:
            ok = False
            messages = "; ".join(e.message or e.status_code or "" for e in result.errors)
            click.echo(f"✗ {result.full_name}: {messages}")
    return ok


def _run(fn):
    try:
        return fn()
    except (MetadataClientError, requests.RequestException) as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)


@click.group()
def main():
    """Metadata API client."""


@main.command()
@click.argument("metadata_type")
@click.argument("names", nargs=-1, required=True)
def read(metadata_type, names):
    """Print definitions of NAMES as JSON."""
    records = _run(lambda: _client().read(metadata_type, list(names)))
    click.echo(json.dumps(records, indent=2))


def _save_command(operation):
    @click.argument("metadata_type")
    @click.argument("source", type=click.File("r"))
    def command(metadata_type, source):
        try:
            records = json.load(source)
        except json.JSONDecodeError as e:
            click.echo(f"✗ {source.name}: invalid JSON: {e}", err=True)
            sys.exit(1)
        results = _run(lambda: getattr(_client(), operation)(metadata_type, records))
        if not _echo_results(results):
            sys.exit(1)
    command.__doc__ = f"{operation.capitalize()} components from a JSON file."
    return command


main.command(name="create")(_save_command("create"))
main.command(name="update")(_save_command("update"))
main.command(name="upsert")(_save_command("upsert"))


@main.command()
@click.argument("metadata_type")
@click.argument("old_name")
@click.argument("new_name")
def rename(metadata_type, old_name, new_name):
    """Rename OLD_NAME to NEW_NAME."""
    result = _run(lambda: _client().rename(metadata_type, old_name, new_name))
    if not _echo_results(result):
        sys.exit(1)


@main.command()
@click.argument("metadata_type")
@click.argument("names", nargs=-1, required=True)
def delete(metadata_type, names):
    """Delete NAMES."""
    results = _run(lambda: _client().delete(metadata_type, list(names)))
    if not _echo_results(results):
        sys.exit(1)


@main.command(name="list")
@click.argument("metadata_type")
@click.option("--folder", default=None, help="Folder for foldered types (reports, documents).")
def list_command(metadata_type, folder):
    """List components of METADATA_TYPE."""
    query = {"type": metadata_type}
    if folder:
        query["folder"] = folder
    for props in _run(lambda: _client().list(query)):
        click.echo(props.get("fullName"))


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False))
@click.option("--run-test", "run_tests", multiple=True, help="Apex test class to run.")
@click.option("--check-only", is_flag=True, help="Validate without saving.")
def deploy(archive, run_tests, check_only):
    """Deploy a package zip and wait for the result."""
    options = {}
    if check_only:
        options["checkOnly"] = True
    if run_tests:
        options["runTests"] = list(run_tests)

    def submit_and_wait():
        job = _client().deploy(archive, options)
        click.echo(f"Deploy submitted: {job.id}")
        return job.complete()

    result = _run(submit_and_wait)
    status = result.status.value if isinstance(result.status, DeployStatus) else result.status
    mark = "✓" if result.success else "✗"
    click.echo(f"{mark} {status}: "
               f"{result.number_components_deployed}/{result.number_components_total} components, "
               f"{result.number_component_errors} errors, "
               f"{result.number_tests_completed} tests completed")
    if not result.success:
        sys.exit(1)


@main.command()
@click.option("--package", "packages", multiple=True, required=True, help="Package name to retrieve.")
@click.option("--output", "-o", type=click.Path(dir_okay=False), required=True)
def retrieve(packages, output):
    """Retrieve packages into a zip file."""
    def submit_and_save():
        job = _client().retrieve({"packageNames": list(packages)})
        click.echo(f"Retrieve submitted: {job.id}")
        return job.save(output)

    path = _run(submit_and_save)
    click.echo(f"✓ Saved {path}")


if __name__ == "__main__":
    main()
