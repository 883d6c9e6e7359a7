"""Allow running BoxLabel with ``python -m boxlabel``."""

from .app import main

main()
