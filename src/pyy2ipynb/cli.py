"""Command-line interface for pyy2ipynb."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from pyy2ipynb import Pyy2IpynbError, StructuralViolation, __version__
from pyy2ipynb.config import get_config
from pyy2ipynb.converter import NotebookConverter, find_documents
from pyy2ipynb.log import configure_logging
from pyy2ipynb.validation.strict import StrictValidator

console = Console()
err_console = Console(stderr=True)


def _resolve_paths(
    paths: tuple[Path, ...], use_all: bool, root: Optional[Path], suffix: str
) -> list[Path]:
    """Return explicit paths, or every matching document under the content root."""
    if paths and use_all:
        raise click.UsageError("Pass either explicit paths or --all, not both.")
    if not paths and not use_all:
        raise click.UsageError("No input paths given (pass one or more files, or --all).")
    if paths:
        return list(paths)

    content_root = Path(root or get_config().content_root).absolute()
    if not content_root.is_dir():
        err_console.print(f"[red]Error:[/red] content root not found at: {content_root}")
        sys.exit(1)
    return find_documents(content_root, suffix)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging on stderr")
def main(verbose: bool):
    """pyy2ipynb - Convert pyy documents to strict nbformat v4 notebooks.

    Loose in, strict out. Images on disk, not in JSON.
    """
    configure_logging("DEBUG" if verbose else get_config().log_level)


@main.command()
@click.argument("paths", nargs=-1, type=click.Path(path_type=Path))
@click.option(
    "--all",
    "use_all",
    is_flag=True,
    help="Convert every document under the content root",
)
@click.option(
    "--root",
    type=click.Path(path_type=Path),
    default=None,
    help="Content root for --all (default: from config or curricula)",
)
@click.option(
    "--check/--no-check",
    default=True,
    help="Strictly validate each notebook right after writing it",
)
def convert(paths: tuple[Path, ...], use_all: bool, root: Optional[Path], check: bool):
    """Convert pyy documents into .ipynb notebooks next to them.

    PATHS: One or more .pyy files (other extensions are skipped)
    """
    config = get_config()
    files = _resolve_paths(paths, use_all, root, config.source_suffix)

    converter = NotebookConverter(
        source_suffix=config.source_suffix,
        output_suffix=config.output_suffix,
        images_suffix=config.images_suffix,
        default_nbformat_minor=config.default_nbformat_minor,
        indent=config.json_indent,
        validate_output=check,
    )

    try:
        results = converter.convert_many(files)
    except Pyy2IpynbError as e:
        err_console.print(f"[red]Conversion failed:[/red] {escape(str(e))}", soft_wrap=True)
        sys.exit(1)

    for result in results:
        images = f" [dim]({len(result.images)} image(s))[/dim]" if result.images else ""
        console.print(f"  [cyan]•[/cyan] {result.output_path}{images}")
    console.print(f"[green]✅ Converted {len(results)} file(s)[/green]")


@main.command()
@click.argument("paths", nargs=-1, type=click.Path(path_type=Path))
@click.option(
    "--all",
    "use_all",
    is_flag=True,
    help="Validate every notebook under the content root",
)
@click.option(
    "--root",
    type=click.Path(path_type=Path),
    default=None,
    help="Content root for --all (default: from config or curricula)",
)
@click.option(
    "--nbformat",
    "with_nbformat",
    is_flag=True,
    help="Also check against the official nbformat schema",
)
def validate(paths: tuple[Path, ...], use_all: bool, root: Optional[Path], with_nbformat: bool):
    """Strictly validate .ipynb notebooks, stopping at the first violation.

    PATHS: One or more .ipynb files
    """
    config = get_config()
    files = _resolve_paths(paths, use_all, root, config.output_suffix)

    if not files:
        console.print(f"[yellow]No {config.output_suffix} files found.[/yellow]")
        return

    validator = StrictValidator()
    try:
        for path in files:
            validator.validate_file(path)
            if with_nbformat:
                validator.validate_with_nbformat(validator.load(path), source=str(path))
    except StructuralViolation as e:
        err_console.print(f"[red]Strict nbformat violation:[/red] {escape(str(e))}", soft_wrap=True)
        sys.exit(1)
    except Pyy2IpynbError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        sys.exit(1)

    console.print("[green]✅ strict nbformat validation passed[/green]")


if __name__ == "__main__":
    main()
