"""immerse — condensed immersion audio from video files."""

__version__ = "0.3.0"
