import sys

from ssdiag.cli import main

sys.exit(main())
