"""Allow ``python -m release_changelog``."""

from release_changelog.cli import main

main()
