import sys

from headnum.cli import main

sys.exit(main())
