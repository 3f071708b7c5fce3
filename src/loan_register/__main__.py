"""Allow ``python -m loan_register``."""

from loan_register.cli import app

if __name__ == "__main__":
    app()
