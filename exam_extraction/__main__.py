"""
Entry point for running the package as a module: python -m exam_extraction
"""

import sys
from exam_extraction.cli import main

if __name__ == "__main__":
    sys.exit(main())
