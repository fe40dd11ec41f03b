"""Entry point for running Whitelabel as a module.

Usage:
    python -m whitelabel [command] [options]

Example:
    python -m whitelabel render --context acme.yaml --output android/app/build.gradle.kts
    python -m whitelabel build customers.yaml --output-dir build/whitelabel
"""

from whitelabel.cli import app

if __name__ == "__main__":
    app()
