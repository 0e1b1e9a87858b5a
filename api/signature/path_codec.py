"""Signature path codec.

A signature path is an ordered list of element ids. Its canonical text form
is compact JSON with no whitespace: [12,47]. Records store a JSON array of
such paths: [[12,47],[3]]. The text form is a durability contract and is
also what the search handlers match substrings against, so it must never
change.
"""
import json
import logging
from typing import Callable, Dict, Iterable, List, Optional

from domain_models import SignatureElement
from errors import InvalidInputError

logger = logging.getLogger(__name__)

_SEPARATORS = (',', ':')

ElementLookup = Callable[[Iterable[int]], Dict[int, SignatureElement]]


def is_valid_path(value, allow_empty: bool = True) -> bool:
    """True when value is a list of positive ints (bools rejected)"""
    if not isinstance(value, (list, tuple)):
        return False
    if not value and not allow_empty:
        return False
    return all(
        isinstance(i, int) and not isinstance(i, bool) and i > 0
        for i in value
    )


def encode_path(path) -> str:
    """[12, 47] -> "[12,47]" ; [] -> "[]" """
    if not is_valid_path(path):
        raise InvalidInputError(f"Invalid signature path: {path!r}")
    return '[' + ','.join(str(i) for i in path) + ']'


def decode_path(text: str) -> List[int]:
    """Parse the canonical text of one path"""
    value = _loads(text)
    if not is_valid_path(value):
        raise InvalidInputError(f"Invalid signature path: {text!r}")
    return list(value)


def encode_path_list(paths) -> str:
    """[[12, 47], [3]] -> "[[12,47],[3]]" """
    if not isinstance(paths, (list, tuple)):
        raise InvalidInputError(f"Signature paths must be a list, got {paths!r}")
    for path in paths:
        if not is_valid_path(path):
            raise InvalidInputError(f"Invalid signature path: {path!r}")
    return json.dumps([list(p) for p in paths], separators=_SEPARATORS)


def decode_path_list(text: Optional[str]) -> List[List[int]]:
    """Parse a stored array of paths; NULL/empty text is the empty list"""
    if text is None or text == '':
        return []
    value = _loads(text)
    if not isinstance(value, list) or not all(is_valid_path(p) for p in value):
        raise InvalidInputError(f"Invalid signature path list: {text!r}")
    return [list(p) for p in value]


def _loads(text: str):
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Malformed signature path text: {text!r}") from e


def missing_label(element_id: int) -> str:
    return f"[ID:{element_id} not found]"


def format_path_label(path: List[int], elements: Dict[int, SignatureElement]) -> str:
    """Render a path as "[i] A / [ii] B"; unresolved ids keep their position"""
    parts = []
    for element_id in path:
        element = elements.get(element_id)
        parts.append(element.label if element else missing_label(element_id))
    return ' / '.join(parts)


class PathLabelResolver:
    """Resolves id paths to human-readable labels.

    The element lookup is injected so the same resolver works over the
    sync repository or any pre-fetched mapping. Lookups are batched: one
    call per resolve_many().
    """

    def __init__(self, lookup: ElementLookup):
        self.lookup = lookup

    def resolve(self, path: List[int]) -> Optional[str]:
        """Label for one path, None for the empty path"""
        labels = self.resolve_many([path])
        return labels[0] if labels else None

    def resolve_many(self, paths: Iterable) -> List[str]:
        """Labels for every valid non-empty path, in order.

        Entries that are not paths are skipped with a warning.
        """
        valid = []
        for path in paths:
            if is_valid_path(path, allow_empty=False):
                valid.append(path)
            else:
                logger.warning(f"Skipping invalid signature path during label resolution: {path!r}")

        ids = {i for path in valid for i in path}
        elements = self.lookup(ids) if ids else {}
        for missing in sorted(ids - set(elements)):
            logger.warning(f"Signature element {missing} referenced by a path no longer exists")
        return [format_path_label(path, elements) for path in valid]
