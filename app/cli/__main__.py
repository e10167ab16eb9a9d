"""
Entry point for ``python -m app.cli``.
"""
from app.cli.cli import app

if __name__ == "__main__":
    app()
