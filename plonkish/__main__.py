import sys

from plonkish.cli import main

sys.exit(main())
