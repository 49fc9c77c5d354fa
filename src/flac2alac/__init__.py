"""flac2alac - batch FLAC to ALAC conversion with bit-exact verification."""

__version__ = "0.3.0"
