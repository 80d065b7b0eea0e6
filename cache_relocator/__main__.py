"""Allow ``python -m cache_relocator``."""

from cache_relocator.main import main

main()
