"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdblocks.cli.commands import parse_cmd, toc_cmd


app = typer.Typer(name="mdblocks", no_args_is_help=True, help="Markdown to structured block elements")

app.command(name="parse")(parse_cmd)
app.command(name="toc")(toc_cmd)
