"""
Loading of the anime-offline-database catalog.
"""

import json
from pathlib import Path
from typing import Union

from .models import Catalog
from .logging import get_logger, FileError, ValidationError

logger = get_logger(__name__)


def read_database(path: Union[str, Path]) -> Catalog:
    """
    Reads the anime-offline-database JSON file.

    Args:
        path: Path to anime-offline-database(-minified).json

    Returns:
        The parsed Catalog.

    Raises:
        FileError: If the file is missing or is not valid JSON.
        ValidationError: If the file holds no anime.
    """
    path = Path(path)
    logger.info(f"Reading database from {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise FileError(f"Database could not be found: {path}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise FileError(f"Failed to parse database {path}: {e}") from e
    except OSError as e:
        raise FileError(f"Database could not be opened: {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ValidationError(f"Database root must be an object: {path}")

    catalog = Catalog.from_dict(raw)
    if not catalog.data:
        raise ValidationError(f"Database contains no anime: {path}")

    logger.info(f"Loaded {len(catalog.data)} anime (last update: {catalog.last_update or 'unknown'})")
    return catalog
