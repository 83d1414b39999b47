"""Capability flags granted to a role on a form"""

import enum


class Capability(enum.Flag):
    NONE = 0
    VIEW = enum.auto()
    INSERT = enum.auto()
    UPDATE = enum.auto()
    DELETE = enum.auto()

    @classmethod
    def all(cls) -> "Capability":
        return cls.VIEW | cls.INSERT | cls.UPDATE | cls.DELETE

    @classmethod
    def from_names(cls, names) -> "Capability":
        """Parse ["VIEW", "update"] into a flag set"""
        result = cls.NONE
        for name in names:
            try:
                result |= cls[name.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown capability: {name}") from None
        return result

    def names(self) -> list[str]:
        return [c.name for c in (Capability.VIEW, Capability.INSERT, Capability.UPDATE, Capability.DELETE) if c in self]


# Form codes protecting staff endpoints
APPOINTMENTS_FORM = "APPOINTMENTS"
HOLIDAYS_FORM = "HOLIDAYS"
PERMISSIONS_FORM = "PERMISSIONS"
