"""robosim: bumper sensor arrays for a multi-robot world simulator."""

__version__ = "0.1.0"
