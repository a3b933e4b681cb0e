"""Jurisdiction roster library.

Public API:
    - Jurisdiction: One state with its abbreviation and FIPS code
    - JurisdictionRoster: Ordered roster with lookup helpers
    - load_roster: Load the bundled (or an overriding) roster data asset
"""

from civic_sync.lib.jurisdictions.roster import Jurisdiction, JurisdictionRoster, load_roster, parse_roster

__all__ = [
    "Jurisdiction",
    "JurisdictionRoster",
    "load_roster",
    "parse_roster",
]
