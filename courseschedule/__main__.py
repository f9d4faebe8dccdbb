"""
Package entry point.

Allows running the application via:

    python -m courseschedule

This simply forwards execution to courseschedule.cli.main().
"""

from courseschedule.cli import main

if __name__ == "__main__":
    main()
