"""Allow ``python -m docweave``."""

from .cli import main

main()
