"""CLI entrypoint: Typer app definition and command registration"""

import typer

from clausereview.cli.commands import (
    accept_cmd, commit_cmd, diff_cmd, export_cmd, findings_cmd, ingest_cmd,
    init_cmd, list_cmd, rank_cmd, reject_cmd, review_cmd, show_cmd,
)


app = typer.Typer(name="clausereview", no_args_is_help=True, help="Contract clause review pipeline")

app.command(name="init")(init_cmd)
app.command(name="ingest")(ingest_cmd)
app.command(name="commit")(commit_cmd)
app.command(name="list")(list_cmd)
app.command(name="review")(review_cmd)
app.command(name="export")(export_cmd)
app.command(name="findings")(findings_cmd)
app.command(name="show")(show_cmd)
app.command(name="accept")(accept_cmd)
app.command(name="reject")(reject_cmd)
app.command(name="rank")(rank_cmd)
app.command(name="diff")(diff_cmd)
