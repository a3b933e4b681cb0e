"""Load and query the jurisdiction roster.

The roster is a versioned JSON data asset (``data/us_states.json``) listing
each jurisdiction's name, USPS abbreviation, and Census FIPS code in the
order the sync engine processes them.  A different file can be supplied to
change the jurisdiction set without a code change.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Iterator

_BUNDLED_ROSTER = "us_states.json"


@dataclass(frozen=True)
class Jurisdiction:
    """A top-level jurisdiction (a US state) processed once per run.

    Attributes:
        name: Full name as used by upstream providers (e.g. "New York").
        abbreviation: Two-letter USPS code (e.g. "NY").
        fips: Two-digit Census FIPS code (e.g. "36").
    """

    name: str
    abbreviation: str
    fips: str

    def __post_init__(self) -> None:
        if not self.name.strip():
            msg = "name must not be empty"
            raise ValueError(msg)
        if not re.fullmatch(r"[A-Z]{2}", self.abbreviation):
            msg = f"abbreviation must be two uppercase letters, got {self.abbreviation!r}"
            raise ValueError(msg)
        if not re.fullmatch(r"\d{2}", self.fips):
            msg = f"fips must be two digits, got {self.fips!r}"
            raise ValueError(msg)


@dataclass(frozen=True)
class JurisdictionRoster:
    """Ordered, immutable set of jurisdictions with lookup helpers."""

    version: str
    jurisdictions: tuple[Jurisdiction, ...]

    def __post_init__(self) -> None:
        names = [j.name.lower() for j in self.jurisdictions]
        abbreviations = [j.abbreviation for j in self.jurisdictions]
        if len(set(names)) != len(names) or len(set(abbreviations)) != len(abbreviations):
            msg = "Roster contains duplicate jurisdiction names or abbreviations"
            raise ValueError(msg)

    def __len__(self) -> int:
        return len(self.jurisdictions)

    def __iter__(self) -> Iterator[Jurisdiction]:
        return iter(self.jurisdictions)

    def get(self, key: str) -> Jurisdiction | None:
        """Find a jurisdiction by full name (case-insensitive) or abbreviation."""
        needle = key.strip()
        for jurisdiction in self.jurisdictions:
            if jurisdiction.abbreviation == needle.upper() or jurisdiction.name.lower() == needle.lower():
                return jurisdiction
        return None

    def abbreviation_for(self, name: str) -> str | None:
        """Return the USPS abbreviation for a jurisdiction name or abbreviation."""
        jurisdiction = self.get(name)
        return jurisdiction.abbreviation if jurisdiction else None

    def fips_for(self, abbreviation: str) -> str | None:
        """Return the FIPS code for a jurisdiction abbreviation or name."""
        jurisdiction = self.get(abbreviation)
        return jurisdiction.fips if jurisdiction else None

    def subset(self, keys: list[str]) -> JurisdictionRoster:
        """Return a roster restricted to ``keys``, preserving declared order.

        Args:
            keys: Jurisdiction names or abbreviations.

        Raises:
            ValueError: If any key does not match a roster entry.
        """
        selected: set[str] = set()
        unknown: list[str] = []
        for key in keys:
            jurisdiction = self.get(key)
            if jurisdiction is None:
                unknown.append(key)
            else:
                selected.add(jurisdiction.abbreviation)
        if unknown:
            msg = f"Unknown jurisdictions: {', '.join(unknown)}"
            raise ValueError(msg)
        return JurisdictionRoster(
            version=self.version,
            jurisdictions=tuple(j for j in self.jurisdictions if j.abbreviation in selected),
        )


def parse_roster(data: object) -> JurisdictionRoster:
    """Validate a decoded roster document.

    Args:
        data: Decoded JSON content.

    Returns:
        The validated roster.

    Raises:
        ValueError: If the document is malformed.
    """
    if not isinstance(data, dict):
        msg = "Roster must be a JSON object"
        raise ValueError(msg)

    for required_key in ("version", "jurisdictions"):
        if required_key not in data:
            msg = f"Roster missing required field: {required_key!r}"
            raise ValueError(msg)

    entries = data["jurisdictions"]
    if not isinstance(entries, list) or not entries:
        msg = "Roster 'jurisdictions' must be a non-empty list"
        raise ValueError(msg)

    jurisdictions: list[Jurisdiction] = []
    for i, raw in enumerate(entries):
        try:
            jurisdictions.append(
                Jurisdiction(name=raw["name"], abbreviation=raw["abbreviation"], fips=raw["fips"])
            )
        except (KeyError, TypeError, ValueError) as exc:
            msg = f"Invalid jurisdiction entry at index {i}: {exc}"
            raise ValueError(msg) from exc

    return JurisdictionRoster(version=str(data["version"]), jurisdictions=tuple(jurisdictions))


def load_roster(path: str | Path | None = None) -> JurisdictionRoster:
    """Load the roster from ``path`` or from the bundled US states asset.

    Args:
        path: Optional roster file overriding the bundled data asset.

    Returns:
        The validated roster.

    Raises:
        ValueError: If the file is not valid roster JSON.
        OSError: If ``path`` cannot be read.
    """
    if path is None:
        text = resources.files("civic_sync.lib.jurisdictions").joinpath("data", _BUNDLED_ROSTER).read_text("utf-8")
        source = f"bundled {_BUNDLED_ROSTER}"
    else:
        text = Path(path).read_text(encoding="utf-8")
        source = str(path)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Roster {source} is not valid JSON: {exc}"
        raise ValueError(msg) from exc

    roster = parse_roster(data)
    logger.debug("Loaded jurisdiction roster {} (version {}, {} entries)", source, roster.version, len(roster))
    return roster
