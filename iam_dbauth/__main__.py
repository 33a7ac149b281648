from iam_dbauth.cli import app

app()
