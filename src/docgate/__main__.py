"""Entry point for 'python -m docgate' command."""

from docgate.cli import main

if __name__ == "__main__":
    main()
