"""LifeGrid sprint scoring and aggregation backend."""

__version__ = "1.0.0"
