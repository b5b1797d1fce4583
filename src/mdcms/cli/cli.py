"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdcms.cli.commands import (
    convert_cmd, delete_cmd, export_cmd, import_cmd, init_cmd, list_cmd, migrate_cmd, show_cmd,
)


app = typer.Typer(name="mdcms", no_args_is_help=True, help="File-backed posts and pages with Markdown/HTML conversion")

app.command(name="init")(init_cmd)
app.command(name="list")(list_cmd)
app.command(name="show")(show_cmd)
app.command(name="delete")(delete_cmd)
app.command(name="convert")(convert_cmd)
app.command(name="migrate")(migrate_cmd)
app.command(name="export")(export_cmd)
app.command(name="import")(import_cmd)
