"""TipTrack - Personal tip income and tax-free threshold tracking."""

__version__ = "0.1.0"
