"""Entry point: python -m dirnotes"""

from dirnotes.cli import app

app(prog_name="dirnotes")
