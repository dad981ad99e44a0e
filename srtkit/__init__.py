"""Read, merge, shift and resynchronise SubRip subtitle files, with the srt command."""

__version__ = "0.1.0"
__all__ = ["cli", "srt"]