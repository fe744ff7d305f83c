"""Allow ``python -m cineconcerts``."""

from cineconcerts.main import main

main()
