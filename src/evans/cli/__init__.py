# Import EvansCLI for programmatic use
# For CLI entry point, use evans.cli.main:main directly
from .main import EvansCLI

__all__ = ["EvansCLI"]
