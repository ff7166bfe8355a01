"""Module entry point for the pinment CLI."""

from .main import main

if __name__ == "__main__":
    main()
