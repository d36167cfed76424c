"""Main entry point into termpix."""

from termpix.app import main

if __name__ == "__main__":
    main()
