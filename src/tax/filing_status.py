"""Filing status enumeration.

Every per-status table in the tax engine is keyed by ``FilingStatus``. Parsing
is lenient: legacy spellings map onto the canonical members and anything
unrecognized falls back to ``SINGLE``.

Example:
    >>> FilingStatus.parse("mfj")
    <FilingStatus.MARRIED_JOINT: 'marriedJoint'>
    >>> FilingStatus.parse("nonsense")
    <FilingStatus.SINGLE: 'single'>
"""

from __future__ import annotations

from enum import Enum


class FilingStatus(str, Enum):
    """Federal filing status."""

    SINGLE = "single"
    MARRIED_JOINT = "marriedJoint"
    MARRIED_SEPARATE = "marriedSeparate"
    HEAD_OF_HOUSEHOLD = "headOfHousehold"
    SURVIVING_SPOUSE = "survivingSpouse"

    @classmethod
    def _missing_(cls, value: object) -> FilingStatus | None:
        if isinstance(value, str):
            return _ALIASES.get(value.strip().lower().replace("_", "").replace(" ", ""))
        return None

    @classmethod
    def parse(cls, value: object) -> FilingStatus:
        """Parse a filing status, defaulting to SINGLE when unrecognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.SINGLE

    @property
    def is_joint(self) -> bool:
        """Whether this status uses the joint-return thresholds."""
        return self in (FilingStatus.MARRIED_JOINT, FilingStatus.SURVIVING_SPOUSE)


_ALIASES: dict[str, FilingStatus] = {
    "single": FilingStatus.SINGLE,
    "s": FilingStatus.SINGLE,
    "marriedjoint": FilingStatus.MARRIED_JOINT,
    "married": FilingStatus.MARRIED_JOINT,
    "marriedfilingjointly": FilingStatus.MARRIED_JOINT,
    "mfj": FilingStatus.MARRIED_JOINT,
    "marriedseparate": FilingStatus.MARRIED_SEPARATE,
    "marriedfilingseparately": FilingStatus.MARRIED_SEPARATE,
    "mfs": FilingStatus.MARRIED_SEPARATE,
    "headofhousehold": FilingStatus.HEAD_OF_HOUSEHOLD,
    "head": FilingStatus.HEAD_OF_HOUSEHOLD,
    "hoh": FilingStatus.HEAD_OF_HOUSEHOLD,
    "survivingspouse": FilingStatus.SURVIVING_SPOUSE,
    "qualifyingsurvivingspouse": FilingStatus.SURVIVING_SPOUSE,
    "widow": FilingStatus.SURVIVING_SPOUSE,
    "qss": FilingStatus.SURVIVING_SPOUSE,
    "qw": FilingStatus.SURVIVING_SPOUSE,
}
