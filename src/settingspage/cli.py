from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import PageConfigError, PageDefinition, build_page, load_page_definition
from .forms import parse_form
from .host import RecordingRegistrar
from .page import SettingsPage
from .store import MemoryOptionStore, OptionStore, YamlOptionStore
from .utils import load_yaml_file
from .validation import ValidationReport, validate_page_data

LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s\n%(message)s\n"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _open_store(path: Path | None) -> OptionStore:
    if path is None:
        return MemoryOptionStore()
    return YamlOptionStore(path)


def _load_page(args: argparse.Namespace) -> SettingsPage:
    definition: PageDefinition = load_page_definition(args.config)
    return build_page(definition, _open_store(getattr(args, "store", None)), RecordingRegistrar())


def _print_report(report: ValidationReport, console: Console) -> None:
    if not report.errors and not report.warnings:
        console.print("[bold green]✓ Page definition passed validation.[/bold green]")
        return

    table = Table(title="Validation", show_lines=False)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Path", style="cyan")
    table.add_column("Message")
    for issue in report.errors:
        table.add_row("[red]error[/red]", escape(issue.path), escape(issue.message))
    for issue in report.warnings:
        table.add_row("[yellow]warning[/yellow]", escape(issue.path), escape(issue.message))
    console.print(table)


def cmd_schema(args: argparse.Namespace, console: Console) -> int:
    page = _load_page(args)
    table = Table(title=f"{page.title} ({page.slug})")
    table.add_column("Group", style="cyan bold", no_wrap=True)
    table.add_column("Field", style="white")
    table.add_column("Type", style="magenta")
    table.add_column("Default")
    table.add_column("Label", style="dim")

    for group in page.registry.groups():
        if not group.fields:
            table.add_row(group.key, "[dim](no fields)[/dim]", "", "", group.title or "")
        for name, item in group.fields.items():
            default = "" if item.default is None else repr(item.default)
            table.add_row(group.key, name, item.type, default, item.label or "")
    console.print(table)
    return 0


def cmd_render(args: argparse.Namespace, console: Console) -> int:
    page = _load_page(args)
    print(page.render_page(args.action))
    return 0


def cmd_get(args: argparse.Namespace, console: Console) -> int:
    page = _load_page(args)
    group = page.registry.get(args.group)
    if group is None or (args.field is not None and args.field not in group.fields):
        target = f"{args.group}.{args.field}" if args.field else args.group
        console.print(f"[red]Unknown setting {escape(target)}[/red]")
        return 2
    value: Any = page.get_setting(args.group, args.field)
    if isinstance(value, dict):
        print(yaml.safe_dump(value, sort_keys=False, allow_unicode=True).rstrip())
    else:
        print(value)
    return 0


def cmd_init(args: argparse.Namespace, console: Console) -> int:
    page = _load_page(args)
    console.print(f"[green]Registered {len(page.registry)} group(s) for {page.slug}[/green]")
    return 0


def _submission_pairs(page: SettingsPage, assignments: Sequence[str]) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    groups: list[str] = []
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        if not sep:
            raise ValueError(f"Expected name=value, got '{assignment}'")
        pairs.append((name, value))
        group = name.split("[", 1)[0]
        if group in page.registry and group not in groups:
            groups.append(group)
    # The rendered form always carries the marker naming each group
    for group in groups:
        pairs.insert(0, (f"{group}[{page.marker_key}]", group))
    return pairs


def cmd_submit(args: argparse.Namespace, console: Console) -> int:
    page = _load_page(args)
    try:
        pairs = _submission_pairs(page, args.values)
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        return 1
    if args.reset:
        pairs.append((page.reset_key, page.config.reset or "reset"))

    saved = page.handle_submission(parse_form(pairs))
    for notice in page.notices.pop_all():
        console.print(f"[green]{notice.message}[/green]")
    for key in saved:
        console.print(f"[cyan]{key}[/cyan]: {escape(str(page.get_setting(key)))}")
    return 0


def cmd_validate(args: argparse.Namespace, console: Console) -> int:
    try:
        data = load_yaml_file(args.config)
    except (OSError, yaml.YAMLError) as exc:
        console.print(f"[bold red]Failed to load {escape(str(args.config))}: {escape(str(exc))}[/bold red]")
        return 1
    report = validate_page_data(data)
    _print_report(report, console)
    return 0 if report.is_valid else 1


def cmd_serve(args: argparse.Namespace, console: Console) -> int:
    from .gui import run_admin

    definition = load_page_definition(args.config)
    run_admin([definition], _open_store(args.store), host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="settingspage", description="Declarative admin settings pages.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_command(name: str, help_text: str, *, store: bool = True) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("config", type=Path, help="Path to the page definition YAML")
        if store:
            sub.add_argument("--store", type=Path, default=None, help="YAML option store (default: in memory)")
        return sub

    add_command("schema", "Show the groups and fields of a page")
    render = add_command("render", "Print the rendered settings form")
    render.add_argument("--action", default="", help="Form action URL")
    get = add_command("get", "Read a stored group or field")
    get.add_argument("group")
    get.add_argument("field", nargs="?", default=None)
    add_command("init", "Register the page, storing defaults for new groups")
    submit = add_command("submit", "Submit form values, e.g. 'colors[accent]=red'")
    submit.add_argument("values", nargs="+")
    submit.add_argument("--reset", action="store_true", help="Press the reset button")
    add_command("validate", "Validate a page definition", store=False)
    serve = add_command("serve", "Serve the page with the NiceGUI admin")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8080)
    return parser


COMMANDS = {
    "schema": cmd_schema,
    "render": cmd_render,
    "get": cmd_get,
    "init": cmd_init,
    "submit": cmd_submit,
    "validate": cmd_validate,
    "serve": cmd_serve,
}


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    console = Console()

    try:
        return COMMANDS[args.command](args, console)
    except PageConfigError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        if exc.report.errors or exc.report.warnings:
            _print_report(exc.report, console)
        return 1


if __name__ == "__main__":
    sys.exit(main())
