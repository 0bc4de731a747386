"""Allow ``python -m hfsnext``."""

from hfsnext.cli.app import app

if __name__ == "__main__":
    app()
