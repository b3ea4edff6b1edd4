"""Allow running with: python -m commerce_tutor"""

from commerce_tutor.cli.main import run

if __name__ == "__main__":
    run()
