import os
import threading
from collections import defaultdict
from pathlib import Path
from typing import Container, Dict, Set

from .. import config
from ..exceptions import NameGenerationError


def _exists(path: Path) -> bool:
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError as e:
        # Anything but "not there" means we cannot tell whether the name is free
        raise NameGenerationError(f"cannot probe {path}: {e}") from e
    return True


def next_free_name(directory: Path, base_name: str, extension: str,
                   taken: Container[str] = ()) -> str:
    """
    Lowest-numbered `{base_name}_{NN}.{extension}` (NN from 01) that is not
    present in `directory` nor listed in `taken`. The name is not reserved.
    """
    counter = 1
    while True:
        candidate = config.DUPLICATE_NAME_PATTERN.format(base=base_name, counter=counter, ext=extension)
        if candidate not in taken and not _exists(directory / candidate):
            return candidate
        counter += 1


class UniqueNameGenerator:
    """
    Hands out suffixed names and remembers them for the rest of the run, so two
    callers can never be given the same name before either has copied.
    """

    def __init__(self):
        self._reserved: Dict[Path, Set[str]] = defaultdict(set)
        self._lock = threading.Lock()

    def next_free_name(self, directory: Path, base_name: str, extension: str) -> str:
        with self._lock:
            reserved = self._reserved[directory]
            name = next_free_name(directory, base_name, extension, taken=reserved)
            reserved.add(name)
            return name
