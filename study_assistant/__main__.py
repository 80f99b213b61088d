"""
Entry point for running the package as a module: python -m study_assistant
"""

import sys
from study_assistant.cli import main

if __name__ == "__main__":
    sys.exit(main())
