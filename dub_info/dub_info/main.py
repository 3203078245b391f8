import click
from dotenv import load_dotenv, find_dotenv

# Load environment variables immediately
load_dotenv(find_dotenv())

from .config import get_config
from .cli.generate import generate
from .logging import setup_logging, set_log_level


@click.group()
def cli():
    """dub-info: dub availability for anime-offline-database."""
    logging_config = get_config().logging
    setup_logging(logging_config.log_file)
    set_log_level(logging_config.file_level, "file")
    set_log_level(logging_config.console_level, "console")


cli.add_command(generate)

if __name__ == "__main__":
    cli()
