import sys

from showfeed.cli import main

sys.exit(main())
