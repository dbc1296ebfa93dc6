"""Entry point for ``python -m jira_mirror``."""

from . import main

if __name__ == "__main__":
    main()
