"""WSGI entrypoint: ``gunicorn -c gunicorn.conf.py``."""

from userauth import create_app

app = create_app()
