# =============================================================================
# Mini-Mailer Entry Point for `python -m mini_mailer`
# =============================================================================
# This module allows Mini-Mailer to be run as a Python module:
#
#   python -m mini_mailer
#
# This is equivalent to running the 'mini-mailer' command after installation.
# =============================================================================

import sys

from mini_mailer.app import main

if __name__ == "__main__":
    sys.exit(main())
