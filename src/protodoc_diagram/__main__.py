"""CLI entry point for protodoc-diagram."""

import json
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler

from protodoc_diagram.config import LayoutConfig, RenderConfig
from protodoc_diagram.ir.graph import SchemaGraph
from protodoc_diagram.layout.engine import layout
from protodoc_diagram.renderers.ascii import AsciiRenderer
from protodoc_diagram.schema import Documentation, load_documentation, parse_documentation
from protodoc_diagram.types import Direction

logger = logging.getLogger("protodoc_diagram")


def _configure_logging(verbose: bool) -> None:
    """Send package logs to stderr through rich; debug level when verbose."""
    handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=verbose)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _render(doc: Documentation, names: tuple[str, ...], config: LayoutConfig, render_config: RenderConfig) -> str:
    files = [doc.file(name) for name in names] if names else doc.files
    if render_config.output_format == "json":
        payload = {}
        for doc_file in files:
            result = layout(SchemaGraph.from_file(doc_file, config), config.direction, config)
            payload[doc_file.name] = result.to_dict()
        return json.dumps(payload, indent=2) + "\n"

    renderer = AsciiRenderer(unicode=render_config.unicode)
    sections: list[str] = []
    for doc_file in files:
        result = layout(SchemaGraph.from_file(doc_file, config), config.direction, config)
        sections.append(f"# {doc_file.name}\n\n{renderer.render(result)}")
    return "\n".join(sections)


@click.command()
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option("--file", "-f", "files", multiple=True, help="Only render this documented file (repeatable)")
@click.option("--direction", "-d", "direction", type=str, default="TB", help="Layer direction (TB, BT, LR, RL)")
@click.option("--ascii", "-a", "use_ascii", is_flag=True, help="Use plain ASCII instead of Unicode")
@click.option(
    "--format", "output_format", type=click.Choice(["text", "json"]), default="text", help="Diagram text or layout JSON"
)
@click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")
@click.option("--verbose", "-v", is_flag=True, help="Log graph and layout details to stderr")
def main(
    input: str | None,
    files: tuple[str, ...],
    direction: str,
    use_ascii: bool,
    output_format: str,
    output: str | None,
    verbose: bool,
) -> None:
    """Render protoc-gen-doc JSON as per-file message reference diagrams."""
    _configure_logging(verbose)

    try:
        config = LayoutConfig(direction=Direction.parse(direction))
    except ValueError as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)

    try:
        doc = load_documentation(input) if input else parse_documentation(sys.stdin.read())
        rendered = _render(doc, files, config, RenderConfig(unicode=not use_ascii, output_format=output_format))
    except ValueError as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)

    if output:
        try:
            with open(output, "w", encoding="utf-8") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered, nl=False)


if __name__ == "__main__":
    main()
