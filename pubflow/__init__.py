"""pubflow: multi-stage publication workflow for submitted documents."""

__version__ = "0.1.0"
