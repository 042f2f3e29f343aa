"""E-Petitions API — citizens create and sign petitions, moderators review and respond."""

__version__ = "1.0.0"
