"""TipTrack command-line interface."""
