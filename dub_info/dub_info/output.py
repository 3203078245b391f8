import json
from pathlib import Path
from typing import Iterable, Union

from .logging import get_logger, FileError

logger = get_logger(__name__)


def write_output(path: Union[str, Path], dubbed_mal_ids: Iterable[int], incomplete_mal_ids: Iterable[int]) -> None:
    """
    Writes dubInfo.json, replacing any previous content.

    Both id lists are written sorted ascending and without duplicates.
    """
    path = Path(path)
    output = {
        "dubbed": sorted(set(dubbed_mal_ids)),
        "incomplete": sorted(set(incomplete_mal_ids)),
    }

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(output, f, indent=2)
    except OSError as e:
        raise FileError(f"Failed to write output to {path}: {e}") from e

    logger.info(f"Saved {len(output['dubbed'])} dubbed / {len(output['incomplete'])} incomplete ids to {path}")
