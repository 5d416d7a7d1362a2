import sys

from gcal_fetch.cli import main

sys.exit(main())
