"""Allow ``python -m graphflow``."""

from graphflow.cli.commands import app

if __name__ == "__main__":
    app()
