"""Allow ``python -m entra_app_provisioner``."""

from .main import main

main()
