"""pixiquant — pixel intensity quantification for well-plate microscopy."""

__version__ = "1.1.0"
