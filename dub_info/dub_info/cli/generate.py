"""
Generate command for dub-info CLI.

Builds dubInfo.json from anime-offline-database and the aniSearch dubbed
anime index.
"""
import sys
import click
from pathlib import Path
from typing import Optional

from .base import console, run_with_progress, print_summary
from ..anisearch import AniSearchClient
from ..config import get_config
from ..constants import LANGUAGE_CODES
from ..database import read_database
from ..output import write_output
from ..reconciler import DubReconciler, ReferenceIndex
from ..logging import get_logger, log_substep, set_log_level, DubInfoError, FetchError

logger = get_logger(__name__)


@click.command()
@click.option(
    "--language", "-l",
    type=click.Choice(sorted(LANGUAGE_CODES), case_sensitive=False),
    help="Search for dubs in this language (default: ANISEARCH_LANGUAGE or german).",
)
@click.option("--database", type=click.Path(dir_okay=False, path_type=Path), help="anime-offline-database JSON file.")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help="Output file for the dub data.")
@click.option("--max-retries", type=click.IntRange(min=0), help="Give up on a page after this many retries (default: never).")
@click.option("--verbose", "-v", is_flag=True, help="Show progress messages on the console.")
def generate(
    language: Optional[str],
    database: Optional[Path],
    output: Optional[Path],
    max_retries: Optional[int],
    verbose: bool
) -> None:
    """Generate complete and incomplete dub data with their respective MAL ids."""
    config = get_config()
    if verbose:
        set_log_level("INFO", "console")

    anisearch_config = config.anisearch
    if max_retries is not None:
        anisearch_config = anisearch_config.model_copy(update={"max_retries": max_retries})

    database_path = database or config.database_path
    output_path = output or config.output_path

    logger.info(
        f"Generate command started (language={language or anisearch_config.language}, "
        f"database={database_path}, output={output_path}, max_retries={anisearch_config.max_retries})"
    )

    client = AniSearchClient(anisearch_config, language=language)

    def save_checkpoint(result) -> None:
        write_output(output_path, result.dubbed, result.incomplete)
        log_substep(f"Saved {len(result.dubbed)} dubbed ids to {output_path}")

    try:
        catalog = read_database(database_path)
        index = ReferenceIndex.from_catalog(catalog.data)
        reconciler = DubReconciler(client, index, checkpoint=save_checkpoint)
        result = run_with_progress(reconciler)
    except KeyboardInterrupt:
        logger.warning("Generate command interrupted")
        console.print("[yellow]Interrupted.[/yellow]")
        sys.exit(130)
    except FetchError as e:
        logger.error(f"Failed to fetch aniSearch data: {e}", exc_info=True)
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except DubInfoError as e:
        logger.error(str(e))
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    finally:
        client.close()

    logger.info(f"Generate command completed: {len(result.dubbed)} dubbed, {len(result.incomplete)} incomplete")
    print_summary(result, client.language, str(output_path))
