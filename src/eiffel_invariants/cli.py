from pathlib import Path
from typing import Optional

import typer

from .config import Settings
from .errors import TransformError
from .logging import get_logger
from .manifest import build_manifest, write_manifest_json
from .rewrite import RewriteResult, transform_source

app = typer.Typer(help="eiffel-invariants – inject invariant checks into Python methods", no_args_is_help=True)


def _rewrite(source: Path, settings: Settings) -> RewriteResult:
    logger = get_logger(__name__)

    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error(f"Cannot read {source}: {exc}")
        raise typer.Exit(code=2) from exc

    try:
        return transform_source(text, filename=str(source), settings=settings)
    except SyntaxError as exc:
        logger.error(f"Cannot parse {source}: {exc}")
        raise typer.Exit(code=2) from exc
    except TransformError as exc:
        logger.error(f"Cannot transform {source}: {exc}")
        raise typer.Exit(code=1) from exc


@app.command()
def transform(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Python module to rewrite"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the rewritten module here instead of stdout"),
    manifest: Optional[Path] = typer.Option(None, "--manifest", help="Write a JSON manifest of guarded methods"),
    suffix: str = typer.Option("_no_invariant", help="Suffix for the renamed original methods"),
) -> None:
    """
    Rewrite every @check_invariant method of SOURCE into a guarded pair.

    The original body is kept under <name><suffix> and a wrapper with the
    original name checks the invariant around the call.
    """
    logger = get_logger(__name__)
    settings = Settings(suffix=suffix)

    result = _rewrite(source, settings)

    if out is None:
        typer.echo(result.source, nl=False)
    else:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(result.source, encoding="utf-8")
        logger.info(f"Wrote {out} ({len(result.records)} guarded methods)")

    if manifest is not None:
        write_manifest_json(build_manifest(source, result), manifest)


@app.command()
def check(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Python module to inspect"),
    suffix: str = typer.Option("_no_invariant", help="Suffix for the renamed original methods"),
) -> None:
    """
    List the @check_invariant methods of SOURCE without writing anything.

    Exits with status 1 if any of them cannot be transformed.
    """
    result = _rewrite(source, Settings(suffix=suffix))

    if not result.records:
        typer.echo(f"{source}: no guarded methods")
        return

    for record in result.records:
        typer.echo(
            f"{source}:{record.line}: {record.class_name}.{record.method} "
            f"guarded by {record.invariant} ({record.timing})"
        )
    typer.echo(f"{len(result.records)} guarded method(s)")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
