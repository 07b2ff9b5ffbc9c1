import sys

from skylar.cli import main

sys.exit(main())
