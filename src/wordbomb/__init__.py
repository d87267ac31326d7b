"""Word suggestion and auto-play engine for syllable word-chain games."""

__version__ = "0.3.0"
