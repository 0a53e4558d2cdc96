"""Field extractors for a single test record.

Every extractor degrades to an empty (or unclassified) value when a field is
missing, except for ``fullTitle``: a test without a title cannot be placed
in the report and raises ``TypeError``.
"""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath
from typing import Any, Final, Iterable, Mapping, Sequence

LOGGER = logging.getLogger(__name__)

_BRACKET_TOKEN: Final[re.Pattern[str]] = re.compile(r"\[([^\]]+)\]")
_BRACKET_WORD: Final[re.Pattern[str]] = re.compile(r"\[(\w+)\]")
_MANUAL_CASE_ID: Final[re.Pattern[str]] = re.compile(r"\[([a-zA-Z#-]+[0-9][^\]]*)\]")
_SPEC_SUFFIX: Final[re.Pattern[str]] = re.compile(r"\.(spec|cy|test)\.(ts|js|jsx|tsx)$")


def _require_full_title(test: Any) -> str:
    if not isinstance(test, Mapping):
        raise TypeError(f"Test record must be a mapping, got {type(test).__name__}")
    full_title = test.get("fullTitle")
    if not isinstance(full_title, str):
        raise TypeError("Test record must provide a 'fullTitle' string")
    return full_title


def extract_area_from_full_file(
    full_file: Any, test_types: Sequence[str], unclassified: str = ""
) -> str:
    """Return the folder path between the test root and the spec file.

    Folders named after a test type are left out:
    ``cypress/e2e/api/billing/invoices/list.cy.js`` gives ``billing/invoices``.
    """
    if not isinstance(full_file, str) or not full_file:
        return unclassified
    # Drop the two leading root folders and the file name itself.
    segments = full_file.replace("\\", "/").split("/")[2:-1]
    area = "/".join(part for part in segments if part and part not in test_types)
    return area or unclassified


def extract_spec_from_full_file(full_file: Any, unclassified: str = "") -> str:
    if not isinstance(full_file, str) or not full_file:
        return unclassified
    name = PurePosixPath(full_file.replace("\\", "/")).name
    stripped = _SPEC_SUFFIX.sub("", name)
    if stripped != name:
        return stripped
    LOGGER.debug("Spec file %s does not carry a test suffix", full_file)
    return PurePosixPath(name).stem or unclassified


def extract_type_from_full_file(
    full_file: Any, test_types: Iterable[str], unclassified: str = ""
) -> str:
    if not isinstance(full_file, str) or not full_file:
        return unclassified
    matches = [
        test_type
        for test_type in test_types
        if test_type and re.search(rf"\b{re.escape(test_type)}\b", full_file)
    ]
    return ", ".join(matches) if matches else unclassified


def category_from_title(full_title: str, test_categories: Sequence[str]) -> str:
    found = [token for token in _BRACKET_WORD.findall(full_title) if token in test_categories]
    return ",".join(found)


def extract_category_from_test(test: Mapping[str, Any], test_categories: Sequence[str]) -> str:
    return category_from_title(_require_full_title(test), test_categories)


def team_from_title(full_title: str, team_names: Sequence[str]) -> str:
    if not team_names:
        return ""
    known = {name.lower() for name in team_names if isinstance(name, str)}
    for token in _BRACKET_TOKEN.findall(full_title):
        if token.lower() in known:
            return token
    return ""


def extract_team_name_from_test(test: Mapping[str, Any], team_names: Sequence[str]) -> str:
    """Return the first bracketed title token naming a known team.

    Matching ignores case; the token is returned as written in the title.
    An empty ``team_names`` always yields ``""``.
    """
    full_title = _require_full_title(test)
    if not team_names:
        LOGGER.debug("No team names configured; team column left empty")
    return team_from_title(full_title, team_names)


def manual_test_case_id_from_titles(title: Any, full_title: Any) -> str:
    for candidate in (title, full_title):
        if not isinstance(candidate, str):
            continue
        match = _MANUAL_CASE_ID.search(candidate)
        if match:
            return match.group(1)
    return ""


def extract_manual_test_case_id_from_test(test: Mapping[str, Any]) -> str:
    full_title = _require_full_title(test)
    return manual_test_case_id_from_titles(test.get("title"), full_title)


def name_from_title(full_title: str) -> str:
    name = _BRACKET_TOKEN.sub("", full_title).strip()
    name = re.sub(r"[,\s]+$", "", name)
    if not name:
        raise ValueError(f"Test title {full_title!r} has no name outside brackets")
    return name


def extract_test_name_from_full_title(full_title: Any) -> str:
    if not isinstance(full_title, str):
        raise TypeError("fullTitle must be a string")
    return name_from_title(full_title)