from countdown.cli import app

app()
