#!/usr/bin/env python3
"""
CLI tool for the Podio controller
Runs single lifecycle operations against Podio and records Tracked State
in a local YAML state file
"""

import asyncio
import json
import logging
import sys

import click
import yaml
from tabulate import tabulate

from config import get_config
from errors import NotFound, ProviderError
from resources.registry import get_registry, register_builtin_controllers
from state import InstanceRecord, StateStore

logger = logging.getLogger(__name__)


def _load_file(filename):
    """Read a YAML/JSON Desired State record"""
    with open(filename, "r") as f:
        if filename.endswith(".yaml") or filename.endswith(".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if not isinstance(data, dict):
        click.echo(f"Error: {filename} must contain a mapping of attributes", err=True)
        sys.exit(1)
    return data


def _registry():
    registry = get_registry()
    if not registry.list_types():
        register_builtin_controllers(registry)
    return registry


async def _resolve(type_name):
    """Resolve a controller, configuring the provider on first use"""
    registry = _registry()
    if not registry.configured:
        await registry.configure(get_config().provider)
    return registry.resolve(type_name)


def _run(coro):
    """Run an operation, turning provider errors into exit status 1"""
    try:
        return asyncio.run(coro)
    except ProviderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _echo_state(state, output="yaml"):
    if output == "json":
        click.echo(json.dumps(state, indent=2))
    else:
        click.echo(yaml.safe_dump(state, default_flow_style=False, sort_keys=False))


def _tracked(store, name):
    record = store.get(name)
    if record is None:
        click.echo(f"Error: no instance named '{name}' in {store.path}", err=True)
        sys.exit(1)
    return record


@click.group()
@click.option("--state-file", "-s", default=None, help="Path of the YAML state file")
@click.option("--log-level", default=None, help="Logging level (default from LOG_LEVEL)")
@click.pass_context
def cli(ctx, state_file, log_level):
    """Podio controller CLI - manage Podio spaces, apps and fields"""
    cli_config = get_config().cli
    logging.basicConfig(
        level=(log_level or cli_config.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = StateStore(state_file or cli_config.state_file)


@cli.command()
def types():
    """List supported entity types"""
    registry = _registry()
    sections = [
        ("Resources", registry.list_resources()),
        ("Data sources", registry.list_data_sources()),
    ]
    for title, names in sections:
        if not names:
            continue
        rows = []
        for name in names:
            schema = registry.get_schema(name)
            rows.append([name, schema.identifier or "", schema.description])
        click.echo(f"{title}:")
        click.echo(
            tabulate(rows, headers=["Type", "Identifier", "Description"], tablefmt="grid")
        )


@cli.command()
@click.argument("type_name")
@click.option(
    "--output", "-o", type=click.Choice(["table", "json", "markdown"]), default="table"
)
def schema(type_name, output):
    """Show the declared schema of an entity type"""
    try:
        entity_schema = _registry().get_schema(type_name)
    except ProviderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output == "json":
        click.echo(json.dumps(entity_schema.to_json_schema(), indent=2))
    elif output == "markdown":
        click.echo(entity_schema.to_markdown())
    else:
        rows = []
        for attr in entity_schema.attributes:
            notes = [v.description() for v in attr.validators]
            if attr.requires_replace:
                notes.append("forces replacement")
            if attr.local:
                notes.append("local only")
            rows.append(
                [attr.name, attr.type.value, attr.requirement.value, "; ".join(notes)]
            )
        click.echo(
            tabulate(rows, headers=["Attribute", "Type", "Requirement", "Notes"], tablefmt="grid")
        )


@cli.command()
@click.argument("type_name")
@click.argument("filename", type=click.Path(exists=True))
def validate(type_name, filename):
    """Validate a Desired State record without calling Podio"""
    desired = _load_file(filename)
    try:
        _registry().get_schema(type_name).validate(desired)
    except ProviderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"{filename} is a valid {type_name} declaration")


@cli.command()
@click.argument("name")
@click.argument("type_name")
@click.argument("filename", type=click.Path(exists=True))
@click.pass_obj
def create(store, name, type_name, filename):
    """Create an entity from a YAML/JSON file and track it as NAME"""
    if store.get(name) is not None:
        click.echo(f"Error: instance '{name}' is already tracked", err=True)
        sys.exit(1)

    desired = _load_file(filename)

    async def run():
        controller = await _resolve(type_name)
        return await controller.create(desired)

    state = _run(run())
    store.put(InstanceRecord(name=name, type_name=type_name, state=state))
    click.echo(f"Created {type_name} '{name}'")
    _echo_state(state)


@cli.command()
@click.argument("name")
@click.pass_obj
def read(store, name):
    """Refresh the tracked state of NAME from Podio"""
    record = _tracked(store, name)

    async def run():
        controller = await _resolve(record.type_name)
        return await controller.read(record.state)

    try:
        state = asyncio.run(run())
    except NotFound as e:
        store.remove(name)
        click.echo(f"{e.detail}; removed '{name}' from state")
        return
    except ProviderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    store.put(InstanceRecord(name=name, type_name=record.type_name, state=state))
    _echo_state(state)


@cli.command()
@click.argument("name")
@click.argument("filename", type=click.Path(exists=True))
@click.pass_obj
def update(store, name, filename):
    """Update NAME in place from a YAML/JSON file"""
    record = _tracked(store, name)
    desired = _load_file(filename)

    async def run():
        controller = await _resolve(record.type_name)
        return await controller.update(desired, record.state)

    state = _run(run())
    store.put(InstanceRecord(name=name, type_name=record.type_name, state=state))
    click.echo(f"Updated {record.type_name} '{name}'")
    _echo_state(state)


@cli.command()
@click.argument("name")
@click.confirmation_option(prompt="Are you sure you want to delete this entity?")
@click.pass_obj
def delete(store, name):
    """Delete NAME from Podio and stop tracking it"""
    record = _tracked(store, name)

    async def run():
        controller = await _resolve(record.type_name)
        await controller.delete(record.state)

    _run(run())
    store.remove(name)
    click.echo(f"Deleted {record.type_name} '{name}'")


@cli.command(name="import")
@click.argument("name")
@click.argument("type_name")
@click.argument("external_id")
@click.pass_obj
def import_(store, name, type_name, external_id):
    """Start tracking an existing entity as NAME"""
    if store.get(name) is not None:
        click.echo(f"Error: instance '{name}' is already tracked", err=True)
        sys.exit(1)

    async def run():
        controller = await _resolve(type_name)
        return await controller.import_state(external_id)

    state = _run(run())
    store.put(InstanceRecord(name=name, type_name=type_name, state=state))
    click.echo(f"Imported {type_name} '{name}'")
    _echo_state(state)


@cli.command()
@click.argument("type_name")
@click.argument("filename", type=click.Path(exists=True))
@click.option("--output", "-o", type=click.Choice(["json", "yaml"]), default="yaml")
def lookup(type_name, filename, output):
    """Resolve a data source declaration"""
    config = _load_file(filename)

    async def run():
        controller = await _resolve(type_name)
        return await controller.read(config)

    _echo_state(_run(run()), output)


@cli.command()
@click.argument("name")
@click.option("--output", "-o", type=click.Choice(["json", "yaml"]), default="yaml")
@click.pass_obj
def show(store, name, output):
    """Show the tracked state of NAME"""
    record = _tracked(store, name)
    _echo_state(record.state, output)


@cli.command(name="list")
@click.pass_obj
def list_(store):
    """List tracked instances"""
    registry = _registry()
    rows = []
    for record in store.list():
        identifier = ""
        if registry.has_type(record.type_name):
            identifier = record.state.get(registry.get_schema(record.type_name).identifier, "")
        rows.append([record.name, record.type_name, identifier])
    click.echo(tabulate(rows, headers=["Name", "Type", "ID"], tablefmt="grid"))


if __name__ == "__main__":
    cli()
