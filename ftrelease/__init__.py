"""Release build orchestration for the FitTrack Android app."""

__version__ = "0.3.0"
