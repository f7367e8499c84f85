"""Entry point: ``python -m memehub``."""

from memehub.app import run

if __name__ == "__main__":
    run()
